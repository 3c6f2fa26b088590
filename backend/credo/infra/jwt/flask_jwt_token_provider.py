# credo/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from credo.services._shared.errors import InvalidTokenError
from credo.services._shared.ports import AccessTokenClaims, TokenProvider

ACCESS_TOKEN_TYPE = "access"
SIGNING_ALGORITHM = "HS256"


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    Tokens are HS256 only. The header algorithm is checked before decoding
    and the decoder is restricted to the same algorithm, so ``none`` and
    asymmetric algorithms are rejected outright.

    .. note::
       Requires an active Flask app context with ``JWT_SECRET_KEY`` set.
    """

    algorithm: str = SIGNING_ALGORITHM

    def create_access_token(
        self, *, subject: str, email: str, expires_delta: timedelta
    ) -> tuple[str, datetime]:
        token = cast(
            str,
            create_access_token(
                identity=subject,
                additional_claims={"email": email},
                expires_delta=expires_delta,
            ),
        )
        claims = cast(dict[str, Any], decode_token(token))
        return token, datetime.fromtimestamp(int(claims["exp"]), tz=UTC)

    def decode_access_token(self, token: str) -> AccessTokenClaims:
        if not token:
            raise InvalidTokenError()
        try:
            header = pyjwt.get_unverified_header(token)
            if header.get("alg") != self.algorithm:
                raise InvalidTokenError("Unexpected signing algorithm")
            claims = cast(dict[str, Any], decode_token(token))
        except (pyjwt.PyJWTError, JWTExtendedException) as exc:
            raise InvalidTokenError() from exc

        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError("Wrong token type")
        subject = claims.get("sub")
        email = claims.get("email")
        if not isinstance(subject, str) or not subject or not isinstance(email, str):
            raise InvalidTokenError()
        return AccessTokenClaims(
            subject=subject,
            email=email,
            issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
        )
