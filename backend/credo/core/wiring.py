"""Composition root: builds the token lifecycle service from settings."""

from __future__ import annotations

import logging

from flask import Flask, current_app

from credo.core.extensions import get_redis
from credo.infra.email.ses_mailer import SESVerificationMailer
from credo.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from credo.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from credo.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from credo.infra.sql.refresh_token_store import SQLAlchemyRefreshTokenStore
from credo.services._shared.ports import (
    NoopVerificationMailer,
    RefreshTokenStore,
    VerificationMailer,
)
from credo.services.auth import AuthTokenConfig, TokenLifecycleService

log = logging.getLogger(__name__)

EXTENSION_KEY = "token_service"


def build_refresh_store(app: Flask) -> RefreshTokenStore:
    backend = app.config.get("REFRESH_TOKEN_BACKEND", "sql")
    if backend == "redis":
        return RedisRefreshTokenStore(get_redis())
    if backend == "sql":
        return SQLAlchemyRefreshTokenStore()
    raise RuntimeError(f"Unknown REFRESH_TOKEN_BACKEND {backend!r}")


def build_mailer(app: Flask) -> VerificationMailer:
    backend = app.config.get("EMAIL_BACKEND", "noop")
    if backend == "ses":
        return SESVerificationMailer.from_config(
            region=app.config.get("AWS_REGION", "us-east-1"),
            from_address=app.config.get("SES_FROM_ADDRESS", ""),
            template_name=app.config.get("SES_VERIFICATION_TEMPLATE", ""),
            app_url=app.config.get("APP_URL", ""),
            endpoint_url=app.config.get("AWS_ENDPOINT_URL"),
        )
    if backend == "noop":
        return NoopVerificationMailer()
    raise RuntimeError(f"Unknown EMAIL_BACKEND {backend!r}")


def build_token_service(
    app: Flask,
    *,
    refresh_store: RefreshTokenStore | None = None,
    mailer: VerificationMailer | None = None,
) -> TokenLifecycleService:
    """Assemble the service. Explicit collaborators win over settings."""
    return TokenLifecycleService(
        token_provider=JWTTokenProvider(algorithm=app.config.get("JWT_ALGORITHM", "HS256")),
        refresh_store=refresh_store or build_refresh_store(app),
        hasher=WerkzeugPasswordHasher(method=app.config.get("PASSWORD_HASH_METHOD", "scrypt")),
        mailer=mailer or build_mailer(app),
        token_cfg=AuthTokenConfig.from_mapping(app.config),
    )


def init_app(app: Flask, **overrides) -> None:
    service = build_token_service(app, **overrides)
    app.extensions[EXTENSION_KEY] = service
    log.info(
        "wiring.token_service refresh_store=%s mailer=%s",
        type(service.refresh_store).__name__,
        type(service.mailer).__name__,
    )


def get_token_service(app: Flask | None = None) -> TokenLifecycleService:
    app = app or current_app
    try:
        return app.extensions[EXTENSION_KEY]
    except KeyError:
        raise RuntimeError("Token service is not initialized. Call init_app() first.") from None
