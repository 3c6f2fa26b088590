"""Service layer public API.

Re-exports
----------
- Base primitives (from ``credo.services._shared.base``)
    * :class:`BaseService`

- Token lifecycle (from ``credo.services.auth``)
    * :class:`TokenLifecycleService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`TokenPairOut`, :class:`UserOut`, :class:`RegistrationOut`,
      :class:`AuthTokenConfig`

- Credentials (from ``credo.services.credentials``)
    * :class:`CredentialCache`
    * :class:`DBCredentials`
"""

from credo.services._shared.base import BaseService
from credo.services.auth import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RegisterIn,
    RegistrationOut,
    TokenLifecycleService,
    TokenPairOut,
    UserOut,
)
from credo.services.credentials import CredentialCache, DBCredentials

__all__ = [
    "AuthTokenConfig",
    "BaseService",
    "CredentialCache",
    "DBCredentials",
    "LoginIn",
    "RefreshIn",
    "RegisterIn",
    "RegistrationOut",
    "TokenLifecycleService",
    "TokenPairOut",
    "UserOut",
]
