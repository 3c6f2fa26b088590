"""User repository for identity lookups."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import cast

from sqlalchemy import select

from credo.models.user import User, normalize_email
from credo.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lookups exclude soft-deleted users unless stated otherwise. It NEVER
    handles tokens or password hashing, only DB-level user management.
    """

    model = User

    def _soft_delete(self, instance: User) -> bool:
        instance.soft_delete(datetime.now(UTC))
        return True

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a live user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(
            User.email == normalize_email(email), User.deleted_at.is_(None)
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str, *, include_deleted: bool = True) -> bool:
        """Check whether an email is taken.

        Soft-deleted users keep their email reserved, hence the default.
        """
        stmt = select(User.id).where(User.email == normalize_email(email))
        if not include_deleted:
            stmt = stmt.where(User.deleted_at.is_(None))
        return self.session.execute(stmt.limit(1)).scalar() is not None

    def get_by_verification_token(self, token: str) -> User | None:
        """Fetch the live user holding a pending verification token."""
        stmt = select(User).where(
            User.email_verification_token == token, User.deleted_at.is_(None)
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())
