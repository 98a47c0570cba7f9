"""
Structured JSON Logging Module.

Every Listify component logs through a ``StructuredLogger``: one JSON
object per line on stdout and, unless ``LOG_FILE`` is empty, in a rotating
log file.  Request lines and ``AUDIT:`` records share the same format.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

_RESERVED_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
    ).__dict__.keys()
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render a record as ``{"timestamp", "level", "logger", "message"}``.

    Keys passed through ``extra=`` are nested under ``"context"``; a
    traceback, when present, goes under ``"exception"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            key: value if isinstance(value, (int, float, bool)) else str(value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False)


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


class StructuredLogger:
    """Injectable wrapper around a named ``logging.Logger``.

    Handlers are attached once per logger name, so building several
    ``StructuredLogger`` objects with the same name is harmless.  Anything
    left unset is read from ``AppConfig``.

    Usage::

        log = StructuredLogger(name="listify.web")
        log.info("GET / 200", extra={"duration_ms": 3.2})
    """

    def __init__(
        self,
        name: str = "listify",
        level: Optional[int] = None,
        stream: Union[TextIO, None] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Deferred so settings are read when the first logger is built.
        from listify.config import get_config
        cfg = get_config()

        self._level: int = level if level is not None else _parse_level(cfg.LOG_LEVEL)
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(self._level)

        if not self._logger.handlers:
            self._attach_handlers(
                stream=stream or sys.stdout,
                log_file=cfg.LOG_FILE if log_file is None else log_file,
                max_bytes=cfg.LOG_MAX_BYTES if max_bytes is None else max_bytes,
                backup_count=cfg.LOG_BACKUP_COUNT if backup_count is None else backup_count,
            )

    def _attach_handlers(
        self, stream: TextIO, log_file: str, max_bytes: int, backup_count: int,
    ) -> None:
        handlers: list[logging.Handler] = [logging.StreamHandler(stream)]

        if log_file:
            try:
                path = Path(log_file)
                path.parent.mkdir(parents=True, exist_ok=True)
                handlers.append(
                    RotatingFileHandler(
                        filename=str(path),
                        maxBytes=max_bytes,
                        backupCount=backup_count,
                        encoding="utf-8",
                    )
                )
            except OSError as exc:
                sys.stderr.write(f"Listify: cannot open log file {log_file!r} ({exc}); console only.\n")

        formatter = JSONFormatter()
        self._logger.propagate = False
        for handler in handlers:
            handler.setLevel(self._level)
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.exception(msg, *args, **kwargs)


def get_logger(name: str = "listify") -> StructuredLogger:
    """Shorthand for ``StructuredLogger(name=name)`` with configured defaults."""
    return StructuredLogger(name=name)
