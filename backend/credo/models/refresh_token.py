"""Refresh-token model: one row per issued refresh token, hash only."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from credo.core.extensions import db
from credo.services._shared.ports.refresh_token_store import RefreshTokenRecord

from .base import CreatedAtMixin, ReprMixin, SoftDeleteMixin, UUIDPKMixin, as_utc


class RefreshToken(UUIDPKMixin, ReprMixin, CreatedAtMixin, SoftDeleteMixin, db.Model):
    """
    Persisted refresh token.

    Fields
    ------
    user_id : str
        Owner. Rows are removed with the user.
    token_hash : str
        Lowercase hex SHA-256 of the raw token (64 chars). Unique, soft-deleted
        rows included.
    expires_at : datetime
        Absolute expiry.
    revoked_at : datetime | None
        Set once, on rotation or logout.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_revoked_at", "revoked_at"),
    )

    @classmethod
    def from_record(cls, record: RefreshTokenRecord) -> RefreshToken:
        return cls(
            id=record.id,
            user_id=record.user_id,
            token_hash=record.token_hash,
            expires_at=record.expires_at,
            created_at=record.created_at,
            revoked_at=record.revoked_at,
        )

    def to_record(self) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            id=self.id,
            user_id=self.user_id,
            token_hash=self.token_hash,
            expires_at=as_utc(self.expires_at),
            created_at=as_utc(self.created_at),
            revoked_at=as_utc(self.revoked_at),
        )
