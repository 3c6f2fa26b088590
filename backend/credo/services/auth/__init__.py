from credo.services.auth.dto import (
    AuthTokenConfig,
    Identity,
    LoginIn,
    RefreshIn,
    RegisterIn,
    RegistrationOut,
    TokenPairOut,
    UserOut,
)
from credo.services.auth.service import TokenLifecycleService

__all__ = [
    "AuthTokenConfig",
    "Identity",
    "LoginIn",
    "RefreshIn",
    "RegisterIn",
    "RegistrationOut",
    "TokenLifecycleService",
    "TokenPairOut",
    "UserOut",
]
