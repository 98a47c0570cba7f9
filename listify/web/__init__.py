"""Web layer: FastAPI application, routes and request dependencies."""

from listify.web.app import create_app

__all__ = ["create_app"]
