"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API can be started locally without any setup.  In a production
deployment you should at least override ``SECRET_KEY`` and point
``MAIL_WEBHOOK_URL`` at the mail relay.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Article Management System")
    api_version: str = os.getenv("API_VERSION", "2.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Lifetime of one-time login keys sent to editors by email.
    key_expire_minutes: int = int(os.getenv("KEY_EXPIRE_MINUTES", "30"))

    # Path or connection string for the SQLite file backing the sheets.
    # Relative paths are resolved against the project root by ``db``.
    database_url: str = os.getenv("DATABASE_URL", "ams.db")

    # Notifications are POSTed as JSON to this URL.  When empty, mail is
    # only written to the log.
    mail_webhook_url: str = os.getenv("MAIL_WEBHOOK_URL", "")
    mail_sender: str = os.getenv("MAIL_SENDER", "ams@localhost")
    mail_timeout: float = float(os.getenv("MAIL_TIMEOUT", "10"))

    # Interval between runs of the periodic cleanup task (expired keys
    # and auth tokens).
    cleanup_interval_seconds: int = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "900"))

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
