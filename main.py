"""
Listify Web Application Entry Point.

Bootstraps the dependency graph via constructor injection, initialises
the SQLite schema, and serves the FastAPI application with uvicorn.
Every subsystem is wired here, no module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import sys

import uvicorn
from fastapi import FastAPI

from listify.config import AppConfig, get_config
from listify.database import DatabaseManager
from listify.logger import StructuredLogger, get_logger
from listify.schema import initialize_schema
from listify.services import create_services
from listify.web import create_app


def build_app(config: AppConfig) -> FastAPI:
    """Wire configuration, store, services and web layer into one app."""
    # ------------------------------------------------------------------
    # 1. Database Manager (single shared SQLite connection)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        sqlite_path=config.DATABASE_PATH,
        logger=StructuredLogger(name="listify.database"),
    )

    # ------------------------------------------------------------------
    # 2. Schema Initialization (idempotent)
    # ------------------------------------------------------------------
    initialize_schema(db.sqlite, StructuredLogger(name="listify.schema"))

    # ------------------------------------------------------------------
    # 3. Service Container (repositories + services)
    # ------------------------------------------------------------------
    services = create_services(db=db, config=config)

    # ------------------------------------------------------------------
    # 4. Web application (closes the database on shutdown)
    # ------------------------------------------------------------------
    return create_app(
        config=config,
        db=db,
        services=services,
        logger=get_logger("listify.web"),
    )


def main() -> None:
    """Application entry point: wire dependencies and serve HTTP."""
    logger: StructuredLogger = get_logger("listify.main")
    config = get_config()
    logger.info("Starting Listify on %s:%d ...", config.HOST, config.PORT)

    app = build_app(config)
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_config=None)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n")
        sys.exit(1)
