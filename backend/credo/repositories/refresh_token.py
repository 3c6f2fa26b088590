"""Refresh-token repository: lookups by hash and conditional revocation."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import CursorResult, select, update

from credo.models.refresh_token import RefreshToken
from credo.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Revocations are single UPDATE statements guarded by ``revoked_at IS NULL``
    so that the database decides which of two racing rotations wins.
    """

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.deleted_at.is_(None),
        )
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def revoke(self, token_id: str, *, now: datetime) -> int:
        """
        Revoke one token if it is still unrevoked.

        :returns: Number of rows updated (0 or 1).
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.id == token_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.deleted_at.is_(None),
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult, self.session.execute(stmt))
        return result.rowcount

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        """
        Revoke every unrevoked token of ``user_id``.

        :returns: Number of rows updated.
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.deleted_at.is_(None),
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult, self.session.execute(stmt))
        return result.rowcount
