"""
Leitor configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("DB_POOL_MAX_SIZE", "10"))

    # Auth (anon/service keys are JWTs signed with this secret)
    JWT_SECRET: str = os.environ.get("JWT_SECRET", "")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_HOURS: int = int(os.environ.get("JWT_EXPIRY_HOURS", str(24 * 365)))

    # Remote scripture API (get-chapter-content proxy)
    BIBLE_API_KEY: str = os.environ.get("BIBLE_API_KEY", "")
    BIBLE_API_URL: str = os.environ.get("BIBLE_API_URL", "https://api.scripture.api.bible/v1")
    BIBLE_API_TIMEOUT: float = float(os.environ.get("BIBLE_API_TIMEOUT", "15"))

    # Reader
    DEFAULT_VERSION_ID: str = os.environ.get("DEFAULT_VERSION_ID", "nvi")

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


# Singleton instance
settings = Settings()

# Validate required settings (skip in test mode)
_testing = os.environ.get("TESTING", "").lower() == "true"

if not _testing:
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable is required")
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET environment variable is required")
