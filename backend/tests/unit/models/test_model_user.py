"""Unit tests for the identity models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from credo.models import User
from credo.models.base import as_utc
from tests.factories.user import UserFactory


class TestUserModel:
    def test_email_is_normalized(self, session):
        user = UserFactory(email="  Mixed.Case@Example.COM ")
        assert user.email == "mixed.case@example.com"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "user@nodot"])
    def test_rejects_malformed_email(self, email):
        with pytest.raises(ValueError):
            User(name="X", email=email, password_hash="h")

    def test_rejects_blank_name(self):
        with pytest.raises(ValueError):
            User(name="   ", email="a@example.com", password_hash="h")

    def test_verification_lifecycle(self):
        now = datetime(2026, 1, 1, tzinfo=UTC)
        user = User(name="V", email="v@example.com", password_hash="h")
        user.set_verification_token("tok", now + timedelta(hours=24))

        assert not user.is_email_verified
        assert not user.verification_expired(now)
        assert not user.verification_expired(now + timedelta(hours=24))
        assert user.verification_expired(now + timedelta(hours=24, microseconds=1))

        user.mark_email_verified(now)
        assert user.is_email_verified
        assert user.email_verification_token is None
        assert user.verification_expired(now)

    def test_soft_delete_keeps_first_timestamp(self):
        user = User(name="D", email="d@example.com", password_hash="h")
        first = datetime(2026, 1, 1, tzinfo=UTC)

        user.soft_delete(first)
        user.soft_delete(first + timedelta(days=1))

        assert user.is_deleted
        assert user.deleted_at == first


def test_as_utc_handles_naive_and_offset_values():
    naive = datetime(2026, 1, 1, 12, 0)
    assert as_utc(naive).tzinfo is UTC
    assert as_utc(None) is None
    offset = datetime.fromisoformat("2026-01-01T14:00:00+02:00")
    assert as_utc(offset) == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
