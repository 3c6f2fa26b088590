"""Links a user to the identity providers they can sign in with."""

from __future__ import annotations

import enum

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from credo.core.extensions import db

from .base import ReprMixin, SoftDeleteMixin, TimestampMixin, UUIDPKMixin


class ProviderType(str, enum.Enum):
    CREDENTIALS = "credentials"
    GOOGLE = "google"
    FACEBOOK = "facebook"


class UserAuthProvider(UUIDPKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    One sign-in method of a user.

    For ``credentials`` the subject id is the normalized email. Social
    providers would store the provider's stable subject identifier.
    """

    __tablename__ = "user_auth_providers"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    provider: Mapped[ProviderType] = mapped_column(
        SAEnum(
            ProviderType,
            name="auth_provider_type",
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    provider_subject_id: Mapped[str] = mapped_column(String(254), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "provider",
            "provider_subject_id",
            name="uq_user_auth_providers_provider_subject",
        ),
        Index("ix_user_auth_providers_user_id", "user_id"),
    )
