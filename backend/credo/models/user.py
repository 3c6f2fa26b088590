"""User model definition for the identity service."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from credo.core.extensions import db

from .base import ReprMixin, SoftDeleteMixin, TimestampMixin, UUIDPKMixin, as_utc


def normalize_email(value: str) -> str:
    """Trim and lowercase an email address."""
    return value.strip().lower()


class User(UUIDPKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    name : str
        Display name.
    email : str
        Login email. Stored normalized (lowercase, trimmed). Unique across all
        rows, soft-deleted ones included.
    password_hash : str
        Salted hash produced by the configured password hasher.
    email_verified_at : datetime | None
        When the email was confirmed. ``None`` means unverified.
    email_verification_token : str | None
        Pending verification token. Cleared once verified.
    email_verification_expires_at : datetime | None
        Expiry of the pending verification token.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    email_verification_token: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )
    email_verification_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email_verification_token", "email_verification_token"),
    )

    # -------------------- Verification API --------------------
    @property
    def is_email_verified(self) -> bool:
        return self.email_verified_at is not None

    def set_verification_token(self, token: str, expires_at: datetime) -> None:
        """
        Replace any pending verification token.

        :param token: Fresh opaque token.
        :param expires_at: Absolute expiry (UTC).
        """
        self.email_verification_token = token
        self.email_verification_expires_at = expires_at

    def verification_expired(self, now: datetime) -> bool:
        """
        Check the pending token's expiry against ``now``.

        A missing expiry counts as expired.
        """
        expires_at = as_utc(self.email_verification_expires_at)
        return expires_at is None or now > expires_at

    def mark_email_verified(self, now: datetime) -> None:
        """Record verification and clear the pending token."""
        self.email_verified_at = now
        self.email_verification_token = None
        self.email_verification_expires_at = None

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = normalize_email(value)
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()
