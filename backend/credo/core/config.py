"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env in development (no-op when absent)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer environment variable, falling back on ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return float(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a placeholder; override in production.
    JWT_SECRET_KEY: str
        HMAC key for access tokens (HS256).
    ACCESS_TOKEN_TTL_MINUTES / REFRESH_TOKEN_TTL_DAYS / EMAIL_VERIFICATION_TTL_HOURS: int
        Token lifetimes.
    REQUIRE_EMAIL_VERIFICATION: bool
        Refuse login/refresh for users who have not verified their email.
    REFRESH_TOKEN_BACKEND: str
        ``"sql"`` (default) or ``"redis"``.
    PASSWORD_HASH_METHOD: str
        Werkzeug hash method.
    SQLALCHEMY_DATABASE_URI: str
        Used as-is unless ``AWS_SECRET_NAME`` is set, in which case it is
        rebuilt from the credential cache at startup.
    AWS_SECRET_NAME: str
        Secrets Manager secret holding the database credentials JSON.
    DB_CREDENTIALS_ENV: str
        Name of an environment variable holding the same JSON blob; used
        when no secret name is configured (local development).
    SECRETS_CACHE_TTL_SECONDS: int
        Credential cache TTL. ``0`` disables caching.
    SECRETS_FETCH_TIMEOUT_SECONDS: float
        Deadline for the initial credential fetch.
    EMAIL_BACKEND: str
        ``"noop"`` (default) or ``"ses"``.
    REQUEST_DEADLINE_SECONDS: float
        Per-request budget for blocking calls. ``0`` disables it.
    EXPOSE_DEV_ENDPOINTS: bool
        Registers the development-only verification-token endpoint.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = "HS256"
    JWT_DECODE_ALGORITHMS = ["HS256"]
    JWT_TOKEN_LOCATION = ["headers"]
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Token lifecycle
    ACCESS_TOKEN_TTL_MINUTES = env_int("ACCESS_TOKEN_TTL_MINUTES", 15)
    REFRESH_TOKEN_TTL_DAYS = env_int("REFRESH_TOKEN_TTL_DAYS", 7)
    EMAIL_VERIFICATION_TTL_HOURS = env_int("EMAIL_VERIFICATION_TTL_HOURS", 24)
    REQUIRE_EMAIL_VERIFICATION = env_bool("REQUIRE_EMAIL_VERIFICATION", True)
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sql").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL", "")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_SSL_MODE = os.getenv("DB_SSL_MODE", "require")

    # AWS / credentials
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
    AWS_ENDPOINT_URL = os.getenv("AWS_ENDPOINT_URL", "")
    AWS_SECRET_NAME = os.getenv("AWS_SECRET_NAME", "")
    DB_CREDENTIALS_ENV = os.getenv("DB_CREDENTIALS_ENV", "")
    SECRETS_CACHE_TTL_SECONDS = env_int("SECRETS_CACHE_TTL_SECONDS", 300)
    SECRETS_FETCH_TIMEOUT_SECONDS = env_float("SECRETS_FETCH_TIMEOUT_SECONDS", 10.0)

    # Email
    EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "noop").strip().lower()
    SES_FROM_ADDRESS = os.getenv("SES_FROM_ADDRESS", "")
    SES_VERIFICATION_TEMPLATE = os.getenv("SES_VERIFICATION_TEMPLATE", "credo-verify-email")
    APP_URL = os.getenv("APP_URL", "http://localhost:8000")

    # Requests
    REQUEST_DEADLINE_SECONDS = env_float("REQUEST_DEADLINE_SECONDS", 10.0)
    EXPOSE_DEV_ENDPOINTS = env_bool("EXPOSE_DEV_ENDPOINTS", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode and the dev-only endpoints by default, and does not
    require TLS to a local database.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    EXPOSE_DEV_ENDPOINTS = env_bool("EXPOSE_DEV_ENDPOINTS", True)
    DB_SSL_MODE = os.getenv("DB_SSL_MODE", "disable")
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a fast password-hash method and no secret store.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    JWT_SECRET_KEY = "testing-jwt-secret-key-with-enough-entropy-0123456789"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    REFRESH_TOKEN_BACKEND = "sql"
    REDIS_URL = ""
    AWS_SECRET_NAME = ""
    DB_CREDENTIALS_ENV = ""
    EMAIL_BACKEND = "noop"
    EXPOSE_DEV_ENDPOINTS = True
    REQUEST_DEADLINE_SECONDS = 0.0


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control. Dev endpoints are forced off.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    EXPOSE_DEV_ENDPOINTS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
