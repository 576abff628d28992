"""
Environment-driven settings for the order service.

JWT_SECRET and the two upstream URLs have no defaults: a missing value is a
startup error, not a silent fallback to an insecure or null value.
"""
import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_pool_size: int
    db_max_overflow: int
    db_pool_timeout: float
    jwt_secret: str
    jwt_algorithm: str
    user_service_url: str
    product_service_url: str
    upstream_timeout: float
    create_order_rate_limit: str
    port: int


def _number(name: str, default: str, cast, problems: list[str]):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        problems.append(f"{name} must be a number, got {raw!r}")
        return cast(default)


def load_settings() -> Settings:
    """Reads and validates settings from the environment (and a .env file)."""
    load_dotenv()
    problems: list[str] = []

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        db_user = os.getenv("DB_USER", "postgres")
        db_password = os.getenv("DB_PASS", "postgres")
        db_host = os.getenv("DB_HOST", "localhost")
        db_port = os.getenv("DB_PORT", "5432")
        db_name = os.getenv("DB_NAME", "orders")
        database_url = f"postgresql+asyncpg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    required = {}
    for name in ("JWT_SECRET", "USER_SERVICE_URL", "PRODUCT_SERVICE_URL"):
        value = os.getenv(name, "").strip()
        if not value:
            problems.append(f"{name} is not set")
        required[name] = value

    pool_size = _number("DB_POOL_SIZE", "5", int, problems)
    max_overflow = _number("DB_MAX_OVERFLOW", "0", int, problems)
    pool_timeout = _number("DB_POOL_TIMEOUT", "30", float, problems)
    upstream_timeout = _number("UPSTREAM_TIMEOUT", "10.0", float, problems)
    port = _number("PORT", "4003", int, problems)

    if problems:
        raise ConfigurationError("FATAL ERROR: invalid configuration: " + "; ".join(problems))

    return Settings(
        database_url=database_url,
        db_pool_size=pool_size,
        db_max_overflow=max_overflow,
        db_pool_timeout=pool_timeout,
        jwt_secret=required["JWT_SECRET"],
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        user_service_url=required["USER_SERVICE_URL"],
        product_service_url=required["PRODUCT_SERVICE_URL"],
        upstream_timeout=upstream_timeout,
        create_order_rate_limit=os.getenv("CREATE_ORDER_RATE_LIMIT", "30/minute"),
        port=port,
    )


@dataclass(frozen=True)
class ObservabilitySettings:
    service_name: str
    log_level: str
    otlp_endpoint: str | None


def load_observability_settings(service_name: str) -> ObservabilitySettings:
    """Logging and tracing settings. Nothing here is required, so this is
    safe to call while the app is being assembled, before `get_settings`."""
    load_dotenv()
    level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"FATAL ERROR: invalid configuration: LOG_LEVEL {level!r} is not a logging level")
    return ObservabilitySettings(
        service_name=service_name,
        log_level=level,
        otlp_endpoint=os.getenv("OTLP_ENDPOINT", "").strip() or None,
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
