"""Flask CLI commands for account maintenance in development."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from credo.core.wiring import get_token_service
from credo.services._shared.errors import AlreadyVerifiedError, UnknownIdentityError


def _ensure_non_production() -> None:
    """Abort token-revealing commands when running in production."""
    config = current_app.config
    app_env = str(config.get("APP_ENV", "")).lower()
    if app_env == "production" or not config.get("EXPOSE_DEV_ENDPOINTS", False):
        raise click.UsageError(
            "The 'flask auth verification-token' command is restricted to "
            "non-production environments."
        )


@click.group("auth")
def auth_cli() -> None:
    """Account and token maintenance commands."""


@auth_cli.command("verification-token")
@click.argument("email")
@with_appcontext
def verification_token_command(email: str) -> None:
    """Print the pending email-verification token for EMAIL."""
    _ensure_non_production()
    try:
        token = get_token_service().pending_verification_token(email)
    except UnknownIdentityError as exc:
        raise click.ClickException(f"No user with email {exc.email}") from exc
    except AlreadyVerifiedError as exc:
        raise click.ClickException("Email is already verified.") from exc
    click.echo(token)
