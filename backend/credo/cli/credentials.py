"""Flask CLI commands for inspecting the database credential cache."""

from __future__ import annotations

import json

import click
from flask.cli import with_appcontext

from credo.core.credentials import get_credential_cache
from credo.services._shared.errors import ServiceError
from credo.services.credentials import CredentialCache


def _require_cache() -> CredentialCache:
    cache = get_credential_cache()
    if cache is None:
        raise click.UsageError(
            "No credential source configured (set AWS_SECRET_NAME or DB_CREDENTIALS_ENV)."
        )
    return cache


@click.group("credentials")
def credentials_cli() -> None:
    """Database credential cache commands."""


@credentials_cli.command("show")
@with_appcontext
def show_command() -> None:
    """Print the current credentials with the password masked."""
    cache = _require_cache()
    try:
        creds = cache.get_credentials()
    except ServiceError as exc:
        raise click.ClickException(f"Credential fetch failed: {exc}") from exc
    click.echo(json.dumps(creds.masked(), indent=2, sort_keys=True))
    click.echo(f"ttl_seconds={cache.ttl_seconds:g} cached={cache.is_populated()}")


@credentials_cli.command("invalidate")
@with_appcontext
def invalidate_command() -> None:
    """Drop the cached entry; the next reader fetches a fresh secret."""
    _require_cache().invalidate()
    click.echo("Credential cache invalidated.")
