"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from credo.models import RefreshToken, User
from credo.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we add a user inside the context and leave without exception
        THEN the row is visible afterwards.
        """
        initial = db.session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())

        assert db.session.query(User).count() == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        initial = db.session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert db.session.query(User).count() == initial

    def test_repositories_share_the_transaction(self, app, db, session):
        with SQLAlchemyUnitOfWork() as uow:
            user = UserFactory.build()
            uow.users.add(user)
            uow.refresh_tokens.add(
                RefreshToken(
                    user_id=user.id,
                    token_hash="a" * 64,
                    expires_at=datetime.now(UTC) + timedelta(days=1),
                )
            )

        assert db.session.query(RefreshToken).filter_by(user_id=user.id).count() == 1
