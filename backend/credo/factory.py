"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from credo.core.config import BaseConfig, get_config
from credo.core.logger import configure_logging, init_app as init_logging
from credo.services._shared.ports import (
    CredentialSource,
    RefreshTokenStore,
    VerificationMailer,
)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
    credential_source: CredentialSource | None = None,
    refresh_store: RefreshTokenStore | None = None,
    mailer: VerificationMailer | None = None,
) -> Flask:
    """Build and configure the Flask application.

    The keyword-only collaborators replace the adapters chosen from settings;
    tests use them to plug in fakes.

    :raises RuntimeError: If a credential source is configured and the first
        fetch fails.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from credo.core import http

    http.init_app(app)

    # Must resolve the database URI before SQLAlchemy binds to it
    from credo.core import credentials

    credentials.init_app(app, source=credential_source)

    from credo.core import extensions

    extensions.init_app(app)

    cache = credentials.get_credential_cache(app)
    if cache is not None:
        with app.app_context():
            credentials.bind_engine(extensions.db.engine, cache)

    init_logging(app)

    from credo.api import init_app as init_api

    init_api(app)

    from credo.core import errors

    errors.init_app(app)

    from credo.core import wiring

    wiring.init_app(app, refresh_store=refresh_store, mailer=mailer)

    from credo import cli as app_cli

    app_cli.init_app(app)

    return app
