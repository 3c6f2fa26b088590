"""Unit tests for the identity repositories."""

from datetime import UTC, datetime

import pytest
from credo.models import ProviderType
from credo.repositories import (
    RefreshTokenRepository,
    UserAuthProviderRepository,
    UserRepository,
)
from tests.factories.user import RefreshTokenFactory, UserAuthProviderFactory, UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs identity lookups."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_get_by_email_is_case_insensitive(self, repo, session):
        u = UserFactory(email="alice@example.com")
        session.commit()

        fetched = repo.get_by_email("ALICE@example.com ")
        assert fetched is not None
        assert fetched.id == u.id

    def test_get_by_email_skips_soft_deleted(self, repo, session):
        u = UserFactory(email="gone@example.com")
        repo.delete(u)
        session.commit()

        assert u.is_deleted
        assert repo.get_by_email("gone@example.com") is None
        assert repo.exists_by_email("gone@example.com")
        assert not repo.exists_by_email("gone@example.com", include_deleted=False)

    def test_exists_by_email(self, repo, session):
        UserFactory(email="bob@example.com")
        session.commit()

        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_get_by_verification_token(self, repo, session):
        u = UserFactory(pending=True)
        session.commit()

        assert repo.get_by_verification_token(u.email_verification_token).id == u.id
        assert repo.get_by_verification_token("unknown") is None


class TestUserAuthProviderRepository:
    @pytest.fixture()
    def repo(self):
        return UserAuthProviderRepository()

    def test_find_by_provider_and_subject(self, repo, session):
        link = UserAuthProviderFactory()
        session.commit()

        found = repo.find_by_provider_and_subject(
            ProviderType.CREDENTIALS, link.provider_subject_id
        )
        assert found is not None
        assert found.user_id == link.user_id
        assert repo.find_by_provider_and_subject(ProviderType.GOOGLE, "x") is None

    def test_list_for_user(self, repo, session):
        link = UserAuthProviderFactory()
        UserAuthProviderFactory()
        session.commit()

        links = repo.list_for_user(link.user_id)
        assert [x.id for x in links] == [link.id]


class TestRefreshTokenRepository:
    @pytest.fixture()
    def repo(self):
        return RefreshTokenRepository()

    def test_revoke_is_conditional(self, repo, session):
        token = RefreshTokenFactory()
        session.commit()
        now = datetime.now(UTC)

        assert repo.revoke(token.id, now=now) == 1
        assert repo.revoke(token.id, now=now) == 0

    def test_revoke_all_skips_revoked_and_deleted(self, repo, session):
        user = UserFactory()
        active = RefreshTokenFactory(user_id=user.id)
        RefreshTokenFactory(user_id=user.id, revoked_at=datetime.now(UTC))
        RefreshTokenFactory(user_id=user.id, deleted_at=datetime.now(UTC))
        session.commit()

        assert repo.revoke_all_for_user(user.id, now=datetime.now(UTC)) == 1
        session.expire_all()
        assert repo.get_by_hash(active.token_hash).revoked_at is not None

    def test_get_by_hash_skips_deleted(self, repo, session):
        token = RefreshTokenFactory(deleted_at=datetime.now(UTC))
        session.commit()

        assert repo.get_by_hash(token.token_hash) is None
