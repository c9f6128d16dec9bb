"""
Runtime configuration.

Every value comes from an environment variable with a development default.
"""
import os
from dataclasses import dataclass, field
from typing import List


def _int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class AppSettings:
    # Hosted backend (Postgres behind the backend-as-a-service)
    database_url: str = "sqlite:///./inventory.db"
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""

    # Object storage
    storage_bucket: str = "public"
    storage_timeout: float = 10.0
    upload_max_retries: int = 3
    max_image_bytes: int = 5 * 1024 * 1024

    # Auth
    auth_timeout: float = 10.0
    password_reset_redirect: str = "http://localhost:5173/reset-password"

    # Cache (seconds)
    cache_ttl_seconds: int = 5 * 60
    items_cache_ttl_seconds: int = 2 * 60
    cache_max_entries: int = 256

    error_log_capacity: int = 50
    trash_retention_days: int = 30

    default_currency: str = "MAD"
    default_language: str = "en"

    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )

    log_level: str = "INFO"
    log_dir: str = "logs"
    log_format: str = "text"


def load_settings() -> AppSettings:
    """Build settings from the process environment."""
    return AppSettings(
        database_url=os.getenv("DATABASE_URL", AppSettings.database_url),
        supabase_url=os.getenv("SUPABASE_URL", AppSettings.supabase_url).rstrip("/"),
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
        storage_bucket=os.getenv("STORAGE_BUCKET", AppSettings.storage_bucket),
        storage_timeout=_float("STORAGE_TIMEOUT", AppSettings.storage_timeout),
        upload_max_retries=_int("UPLOAD_MAX_RETRIES", AppSettings.upload_max_retries),
        max_image_bytes=_int("MAX_IMAGE_BYTES", AppSettings.max_image_bytes),
        auth_timeout=_float("AUTH_TIMEOUT", AppSettings.auth_timeout),
        password_reset_redirect=os.getenv(
            "PASSWORD_RESET_REDIRECT", AppSettings.password_reset_redirect
        ),
        cache_ttl_seconds=_int("CACHE_TTL_SECONDS", AppSettings.cache_ttl_seconds),
        items_cache_ttl_seconds=_int(
            "ITEMS_CACHE_TTL_SECONDS", AppSettings.items_cache_ttl_seconds
        ),
        cache_max_entries=_int("CACHE_MAX_ENTRIES", AppSettings.cache_max_entries),
        error_log_capacity=_int("ERROR_LOG_CAPACITY", AppSettings.error_log_capacity),
        trash_retention_days=_int("TRASH_RETENTION_DAYS", AppSettings.trash_retention_days),
        default_currency=os.getenv("DEFAULT_CURRENCY", AppSettings.default_currency),
        default_language=os.getenv("DEFAULT_LANGUAGE", AppSettings.default_language),
        cors_origins=_list("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"),
        log_level=os.getenv("LOG_LEVEL", AppSettings.log_level).upper(),
        log_dir=os.getenv("LOG_DIR", AppSettings.log_dir),
        log_format=os.getenv("LOG_FORMAT", AppSettings.log_format),
    )
