"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API can start against a local SQLite file without any setup.  In a
production deployment you should override these via environment
variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Library Circulation API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Optional path of a log file.  When empty, logs only go to the console.
    log_file: str = os.getenv("LOG_FILE", "")

    # Size at which the log file rotates, and how many rotated files are kept.
    log_max_bytes: int = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
    log_backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "3"))

    # Prefix under which all routers are mounted.  The historical clients
    # call ``/api/livros`` and friends, so ``/api`` is the default.
    api_prefix: str = os.getenv("API_PREFIX", "/api")

    # Path or connection string for the SQLite database.  Relative paths
    # are resolved against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "library.db")

    # Seconds a connection waits on a locked database before giving up.
    db_timeout: float = float(os.getenv("DB_TIMEOUT", "5"))

    # Amount charged per overdue day by the default fine policy.
    fine_daily_rate: float = float(os.getenv("FINE_DAILY_RATE", "1.00"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
