from credo.models.auth_provider import ProviderType, UserAuthProvider
from credo.models.refresh_token import RefreshToken
from credo.models.user import User

__all__ = [
    "ProviderType",
    "RefreshToken",
    "User",
    "UserAuthProvider",
]
