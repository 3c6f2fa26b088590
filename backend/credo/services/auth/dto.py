# credo/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param name: Display name.
    :type name: str
    :param email: Login email (normalized by the service).
    :type email: str
    :param password: Raw password (hashed by the service).
    :type password: str
    """

    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token (64 hex chars).
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Signed access JWT.
    :type access_token: str
    :param refresh_token: Raw refresh token. Only its hash is stored.
    :type refresh_token: str
    :param expires_at: Access token expiry (UTC).
    :type expires_at: datetime
    """

    access_token: str
    refresh_token: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public view of a user.

    :param id: User id (UUID string).
    :param name: Display name.
    :param email: Normalized email.
    :param email_verified_at: Verification time or ``None``.
    :param created_at: Creation time.
    """

    id: str
    name: str
    email: str
    email_verified_at: datetime | None
    created_at: datetime | None


@dataclass(frozen=True, slots=True)
class RegistrationOut:
    """
    Result of a registration.

    :param user: The created user.
    :param verification_token: Token mailed to the user. Only exposed to
        callers that are allowed to see it (CLI, dev endpoint).
    """

    user: UserOut
    verification_token: str


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated identity resolved from a bearer token."""

    user_id: str
    email: str


# ------------------------------ Config DTO --------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param verification_expires: Email-verification token lifetime.
    :type verification_expires: timedelta
    :param require_verified_email: Refuse login and refresh for unverified users.
    :type require_verified_email: bool
    """

    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
    verification_expires: timedelta = timedelta(hours=24)
    require_verified_email: bool = True

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """Build from a Flask config mapping."""
        return cls(
            access_expires=timedelta(minutes=int(config.get("ACCESS_TOKEN_TTL_MINUTES", 15))),
            refresh_expires=timedelta(days=int(config.get("REFRESH_TOKEN_TTL_DAYS", 7))),
            verification_expires=timedelta(
                hours=int(config.get("EMAIL_VERIFICATION_TTL_HOURS", 24))
            ),
            require_verified_email=bool(config.get("REQUIRE_EMAIL_VERIFICATION", True)),
        )
