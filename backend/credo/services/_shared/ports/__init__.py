"""
credo.services._shared.ports
============================

Collection of *ports* (hexagonal interfaces) that define the contracts
between the service layer and authentication infrastructure.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` for signing and verifying access tokens, and
    :class:`~.TokenValidator`, the narrow view request middleware depends on.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenRecord` for
    refresh-token persistence with conditional revocation.

- :mod:`password_hasher`:
    :class:`~.PasswordHasher` for one-way password hashing.

- :mod:`credential_source`:
    :class:`~.CredentialSource` for the remote database secret.

- :mod:`mailer`:
    :class:`~.VerificationMailer` for verification-link delivery.

Concrete adapters live under ``credo.infra``. Test doubles live beside each
port.
"""

from __future__ import annotations

from .credential_source import CredentialSource, ScriptedCredentialSource
from .mailer import (
    NoopVerificationMailer,
    RecordingVerificationMailer,
    VerificationEmail,
    VerificationMailer,
)
from .password_hasher import PasswordHasher, PlainTextPasswordHasher
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_provider import (
    AccessTokenClaims,
    StubTokenProvider,
    TokenProvider,
    TokenValidator,
)

__all__ = [
    "AccessTokenClaims",
    "CredentialSource",
    "InMemoryRefreshTokenStore",
    "NoopVerificationMailer",
    "PasswordHasher",
    "PlainTextPasswordHasher",
    "RecordingVerificationMailer",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "ScriptedCredentialSource",
    "StubTokenProvider",
    "TokenProvider",
    "TokenValidator",
    "VerificationEmail",
    "VerificationMailer",
]
