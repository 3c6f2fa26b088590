"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    EmailSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
    VerifyEmailQuerySchema,
    WhoAmISchema,
)

__all__ = [
    "EmailSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserSchema",
    "VerifyEmailQuerySchema",
    "WhoAmISchema",
]
