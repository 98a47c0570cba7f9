"""
Listify settings.

``AppConfig`` reads environment variables (and ``.env`` when present)
through pydantic-settings.  ``main.py`` builds one instance and passes it
down; the logger reaches it through :func:`get_config`.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import ClassVar, Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

from listify.models.enums import Category


class AppConfig(BaseSettings):
    """Every tunable of the Listify server, with development defaults."""

    # --- Web server ---
    ENV: str = "development"
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    # --- Storage ---
    DATABASE_PATH: Path = Path("listify.db")
    STORE_TIMEOUT_S: float = Field(default=5.0, gt=0)

    # --- Session cookie ---
    SESSION_COOKIE_NAME: str = "listify"
    SESSION_SECRET_KEY: SecretStr = SecretStr("change-me")
    SESSION_MAX_AGE_S: int = 7 * 24 * 60 * 60

    # --- Tasks ---
    # New tasks always land in this list until the user moves them.
    DEFAULT_TASK_CATEGORY: Category = Category.EAT

    # --- Credentials ---
    PASSWORD_HASH_ITERATIONS: int = 200_000

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "listify.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    INSECURE_SECRETS: ClassVar[frozenset[str]] = frozenset({"", "change-me"})

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_insecure_defaults(self) -> "AppConfig":
        """Warn when the session secret is a known placeholder."""
        if self.SESSION_SECRET_KEY.get_secret_value() in self.INSECURE_SECRETS:
            logging.getLogger("listify.config").warning(
                "SESSION_SECRET_KEY is a placeholder, so session cookies can be "
                "forged. Set a random secret outside development."
            )

        return self

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


# ---------------------------------------------------------------------------
# Shared instance
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    The first call reads ``.env`` and the environment; later calls return
    the same instance.  ``main.py`` and the logger share it.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                if not Path(".env").exists():
                    logging.getLogger("listify.config").warning(
                        "No .env file found; configuration comes from "
                        "environment variables and defaults."
                    )
                _config_instance = AppConfig()
    return _config_instance
