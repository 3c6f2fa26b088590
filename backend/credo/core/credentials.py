"""Database credential wiring: secret source, process cache and engine hook."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from flask import Flask, current_app
from sqlalchemy import event
from sqlalchemy.engine import Engine

from credo.infra.secrets.env_source import EnvCredentialSource
from credo.infra.secrets.secrets_manager_source import SecretsManagerSource
from credo.services._shared.deadline import Deadline
from credo.services._shared.errors import ServiceError
from credo.services._shared.ports import CredentialSource
from credo.services.credentials import CredentialCache

log = logging.getLogger(__name__)

EXTENSION_KEY = "credential_cache"


def build_credential_source(config: Mapping[str, Any]) -> CredentialSource | None:
    """Pick the secret source from settings, or ``None`` for a static URI."""
    secret_name = config.get("AWS_SECRET_NAME")
    if secret_name:
        timeout = float(config.get("SECRETS_FETCH_TIMEOUT_SECONDS", 10.0))
        return SecretsManagerSource.from_config(
            secret_id=secret_name,
            region=config.get("AWS_REGION"),
            endpoint_url=config.get("AWS_ENDPOINT_URL"),
            connect_timeout=min(timeout, 3.0),
            read_timeout=timeout,
        )
    env_var = config.get("DB_CREDENTIALS_ENV")
    if env_var:
        return EnvCredentialSource(env_var)
    return None


def build_credential_cache(
    config: Mapping[str, Any], source: CredentialSource | None = None
) -> CredentialCache | None:
    """Return a cache over ``source`` (or the configured one), or ``None``."""
    source = source or build_credential_source(config)
    if source is None:
        return None
    return CredentialCache(source, ttl=float(config.get("SECRETS_CACHE_TTL_SECONDS", 300)))


def get_credential_cache(app: Flask | None = None) -> CredentialCache | None:
    app = app or current_app
    return app.extensions.get(EXTENSION_KEY)


def init_app(app: Flask, *, source: CredentialSource | None = None) -> None:
    """
    Resolve ``SQLALCHEMY_DATABASE_URI`` from the credential cache.

    Must run before the SQLAlchemy extension is bound. A no-op when no secret
    source is configured.

    :param source: Override for the configured source (tests).
    :raises RuntimeError: If the initial fetch fails. There is no fallback URI.
    """
    cache = build_credential_cache(app.config, source)
    if cache is None:
        return
    app.extensions[EXTENSION_KEY] = cache

    deadline = Deadline.after(float(app.config.get("SECRETS_FETCH_TIMEOUT_SECONDS", 10.0)))
    try:
        creds = cache.get_credentials(deadline=deadline)
    except ServiceError as exc:
        log.error("credentials.startup_failed error=%s", exc)
        raise RuntimeError("Unable to load database credentials at startup") from exc

    url = creds.to_url(sslmode=app.config.get("DB_SSL_MODE") or None)
    app.config["SQLALCHEMY_DATABASE_URI"] = url.render_as_string(hide_password=False)
    log.info("credentials.loaded host=%s dbname=%s", creds.host, creds.dbname)


def bind_engine(engine: Engine, cache: CredentialCache) -> None:
    """
    Refresh connect arguments from ``cache`` for every new DBAPI connection.

    Pooled connections keep the credentials they were opened with; only new
    connections see a rotated secret.
    """

    @event.listens_for(engine, "do_connect")
    def _inject_credentials(dialect, conn_rec, cargs, cparams):  # noqa: ARG001
        cparams.update(cache.get_credentials().connect_kwargs())
