"""
FastAPI application factory.

Wires the session cookie, method override, request logging and the
error handlers around the routes.  The ``DatabaseManager`` and service
container are created by the caller (``main.py`` or a test fixture) and
handed in; the app closes the database when it shuts down.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from urllib.parse import parse_qs

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.middleware.sessions import SessionMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from listify.config import AppConfig
from listify.database import DatabaseManager
from listify.errors import (
    AuthenticationRequiredError,
    ErrorKind,
    ListifyError,
    PUBLIC_MESSAGES,
)
from listify.logger import StructuredLogger
from listify.services import ServiceContainer
from listify.web.routes import router

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORE_UNAVAILABLE: 503,
    ErrorKind.INVALID_INPUT: 400,
}


class MethodOverrideMiddleware:
    """Dispatch ``POST ...?_method=PUT|DELETE`` as that method.

    HTML forms can only submit GET and POST.
    """

    ALLOWED_METHODS: frozenset[str] = frozenset({"PUT", "PATCH", "DELETE"})

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "POST":
            query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
            override = (query.get("_method") or [""])[0].upper()
            if override in self.ALLOWED_METHODS:
                scope = {**scope, "method": override}
        await self.app(scope, receive, send)


def _error_response(kind: ErrorKind, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_KIND[kind],
        content={"error": str(kind), "message": message},
    )


def register_exception_handlers(app: FastAPI, logger: StructuredLogger) -> None:
    """Map the typed error taxonomy onto HTTP responses."""

    @app.exception_handler(AuthenticationRequiredError)
    async def _authentication_required(request: Request, exc: AuthenticationRequiredError) -> Response:
        logger.info("Unauthenticated %s %s redirected.", request.method, request.url.path)
        return RedirectResponse("/", status_code=303)

    @app.exception_handler(ListifyError)
    async def _classified_error(request: Request, exc: ListifyError) -> Response:
        log = logger.warning if exc.kind in (ErrorKind.INVALID_INPUT, ErrorKind.NOT_FOUND) else logger.error
        log(
            "%s %s failed (%s): %s; cause: %r",
            request.method,
            request.url.path,
            exc.kind,
            exc.message,
            exc.original_error,
        )
        return _error_response(exc.kind, exc.public_message)

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> Response:
        logger.warning(
            "%s %s rejected: %s", request.method, request.url.path, exc.errors(),
        )
        return _error_response(ErrorKind.INVALID_INPUT, PUBLIC_MESSAGES[ErrorKind.INVALID_INPUT])


def create_app(
    config: AppConfig,
    db: DatabaseManager,
    services: ServiceContainer,
    logger: StructuredLogger,
) -> FastAPI:
    """Build the ASGI application around an already-initialised store."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("Listify started (%s).", config.ENV)
        try:
            yield
        finally:
            db.close()
            logger.info("Listify shut down.")

    app = FastAPI(title="Listify", lifespan=lifespan, docs_url=None, redoc_url=None)
    app.state.services = services
    app.state.config = config

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s raised an unhandled error", request.method, request.url.path)
            raise
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.info(
            "%s %s %d",
            request.method,
            request.url.path,
            response.status_code,
            extra={"duration_ms": duration_ms},
        )
        return response

    # Added last = outermost: the override is applied before routing and
    # the session is loaded before any handler runs.
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.SESSION_SECRET_KEY.get_secret_value(),
        session_cookie=config.SESSION_COOKIE_NAME,
        max_age=config.SESSION_MAX_AGE_S,
        same_site="lax",
        https_only=config.is_production,
    )
    app.add_middleware(MethodOverrideMiddleware)

    register_exception_handlers(app, logger)
    app.include_router(router)
    return app
