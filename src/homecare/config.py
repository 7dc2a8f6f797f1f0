from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


def _parse_int_list(raw: str) -> List[int]:
    return [int(part) for part in raw.split(",") if part.strip()]


@dataclass
class Settings:
    """Centralized application settings.

    This keeps environment-variable handling in one place so other modules can
    depend on strongly-typed attributes instead of calling os.getenv
    directly.
    """

    # Optional database configuration for SQL-backed repositories.
    database_url: Optional[str] = os.getenv("DATABASE_URL")
    use_sql_repos: bool = os.getenv("USE_SQL_REPOS", "false").lower() == "true"

    # Basic API authentication configuration.
    # When ENABLE_API_AUTH=true, protected endpoints require a valid API key.
    enable_api_auth: bool = os.getenv("ENABLE_API_AUTH", "false").lower() == "true"
    # Comma-separated list of allowed API keys when auth is enabled, each
    # optionally suffixed with ":ROLE" and ":STAFF_ID".
    api_keys: Optional[str] = os.getenv("API_KEYS")

    # Shared secret expected as "Authorization: Bearer <secret>" on the daily
    # credential check. Unset means the check endpoint is open.
    cron_secret: Optional[str] = os.getenv("CRON_SECRET")

    # Directory where uploaded credential documents are stored.
    upload_dir: Path = Path(os.getenv("UPLOAD_DIR", "uploads"))
    # Public URL prefix returned for stored uploads.
    upload_url_prefix: str = os.getenv("UPLOAD_URL_PREFIX", "/uploads")
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Reminder thresholds (days before expiration) used when a credential
    # type does not define its own.
    credential_default_reminder_days: List[int] = field(
        default_factory=lambda: _parse_int_list(os.getenv("CREDENTIAL_DEFAULT_REMINDER_DAYS", "30"))
    )

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS configuration: comma-separated origins (e.g. "https://app.example.com,https://admin.example.com").
    # Default is "*" (allow all) which is acceptable for local development but
    # should be tightened in production.
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")


settings = Settings()
