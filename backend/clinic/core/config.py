"""
Centralized configuration module for application-wide settings.

Settings are read once from environment variables (a local ``.env`` file is
loaded first when present) and exposed as module-level constants.
"""

import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# ===========================
# Database Configuration
# ===========================


def get_database_url() -> str:
    """
    Get the database URL from environment variable.

    Environment Variables:
        DATABASE_URL: SQLAlchemy URL (e.g. 'postgresql://user:pw@host/clinic')
            Default: 'sqlite:///./clinic.db'

    The value is re-read on every call so tests can point the engine at an
    in-memory database before it is created.
    """
    return os.getenv("DATABASE_URL", "sqlite:///./clinic.db")


def is_testing() -> bool:
    return _get_bool(os.getenv("TESTING"), default=False)


# ===========================
# Logging Configuration
# ===========================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _get_bool(os.getenv("LOG_JSON"), default=False)
LOG_TO_FILE = _get_bool(os.getenv("LOG_TO_FILE"), default=False)
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)


def log_config() -> None:
    """
    Log the active configuration.

    Should be called during startup, after logging is configured, to provide
    visibility into which database and log settings are in effect.
    """
    logger.info(
        "Configuration initialized",
        extra={
            "context": {
                "database_driver": get_database_url().split(":", 1)[0],
                "log_level": LOG_LEVEL,
                "log_json": LOG_JSON,
                "log_to_file": LOG_TO_FILE,
                "sql_echo": SQL_ECHO,
                "testing": is_testing(),
            }
        },
    )
