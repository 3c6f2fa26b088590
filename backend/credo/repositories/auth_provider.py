"""Repository for the user/identity-provider links."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from credo.models.auth_provider import ProviderType, UserAuthProvider
from credo.repositories.base import BaseRepository


class UserAuthProviderRepository(BaseRepository[UserAuthProvider]):
    model = UserAuthProvider

    def find_by_provider_and_subject(
        self, provider: ProviderType, subject_id: str
    ) -> UserAuthProvider | None:
        stmt = select(UserAuthProvider).where(
            UserAuthProvider.provider == provider,
            UserAuthProvider.provider_subject_id == subject_id,
            UserAuthProvider.deleted_at.is_(None),
        )
        return cast(UserAuthProvider | None, self.session.execute(stmt).scalars().first())

    def list_for_user(self, user_id: str) -> list[UserAuthProvider]:
        stmt = (
            select(UserAuthProvider)
            .where(
                UserAuthProvider.user_id == user_id,
                UserAuthProvider.deleted_at.is_(None),
            )
            .order_by(UserAuthProvider.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())
