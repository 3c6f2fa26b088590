"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from credo.repositories.auth_provider import UserAuthProviderRepository
from credo.repositories.base import BaseRepository
from credo.repositories.refresh_token import RefreshTokenRepository
from credo.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserAuthProviderRepository",
    "UserRepository",
]
