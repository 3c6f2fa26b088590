from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from credo.services._shared.errors import InvalidTokenError


@dataclass(frozen=True, slots=True)
class AccessTokenClaims:
    """
    Verified claims of an access token.

    :ivar subject: User id carried in ``sub``.
    :ivar email: Email claim.
    :ivar issued_at: ``iat`` as an aware UTC datetime.
    :ivar expires_at: ``exp`` as an aware UTC datetime.
    """

    subject: str
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenProvider(Protocol):
    """Port for issuing and verifying signed access tokens."""

    def create_access_token(
        self, *, subject: str, email: str, expires_delta: timedelta
    ) -> tuple[str, datetime]:
        """
        Sign a new access token.

        :returns: ``(token, expires_at)`` where ``expires_at`` matches the ``exp`` claim.
        """

    def decode_access_token(self, token: str) -> AccessTokenClaims:
        """
        Verify signature, algorithm, token type and expiry.

        :raises InvalidTokenError: On any verification failure.
        """


class TokenValidator(Protocol):
    """What request middleware needs: a way to turn a bearer token into an identity."""

    def validate_access_token(self, token: str) -> tuple[str, str]:
        """:returns: ``(user_id, email)``. :raises InvalidTokenError: When rejected."""


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests."""

    def __init__(self, *, now: datetime | None = None) -> None:
        self.now = now
        self._seq = 0
        self._issued: dict[str, AccessTokenClaims] = {}

    def _now(self) -> datetime:
        return self.now or datetime.now(UTC)

    def create_access_token(
        self, *, subject: str, email: str, expires_delta: timedelta
    ) -> tuple[str, datetime]:
        self._seq += 1
        issued_at = self._now()
        token = f"access.{subject}.{self._seq}"
        claims = AccessTokenClaims(
            subject=subject,
            email=email,
            issued_at=issued_at,
            expires_at=issued_at + expires_delta,
        )
        self._issued[token] = claims
        return token, claims.expires_at

    def decode_access_token(self, token: str) -> AccessTokenClaims:
        claims = self._issued.get(token)
        if claims is None or self._now() >= claims.expires_at:
            raise InvalidTokenError()
        return claims
