"""Factory Boy definitions for identity models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import factory
from credo.models import ProviderType, RefreshToken, User, UserAuthProvider
from tests.factories import BaseFactory
from werkzeug.security import generate_password_hash

# Must match TestingConfig.PASSWORD_HASH_METHOD so the app can verify it
TEST_HASH_METHOD = "pbkdf2:sha256:1000"
DEFAULT_PASSWORD = "password123"


class UserFactory(BaseFactory):
    """
    Build persisted :class:`credo.models.User` instances.

    Users are verified by default; pass ``email_verified_at=None`` for a
    pending account. ``password`` sets the raw password to hash.
    """

    class Meta:
        model = User
        exclude = ("password",)

    password = DEFAULT_PASSWORD
    name = factory.Faker("name")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password_hash = factory.LazyAttribute(
        lambda o: generate_password_hash(o.password, method=TEST_HASH_METHOD)
    )
    email_verified_at = factory.LazyFunction(lambda: datetime.now(UTC))

    class Params:
        pending = factory.Trait(
            email_verified_at=None,
            email_verification_token=factory.Sequence(lambda n: f"verify-token-{n}"),
            email_verification_expires_at=factory.LazyFunction(
                lambda: datetime.now(UTC) + timedelta(hours=24)
            ),
        )


class UserAuthProviderFactory(BaseFactory):
    class Meta:
        model = UserAuthProvider
        exclude = ("user",)

    user = factory.SubFactory(UserFactory)
    user_id = factory.SelfAttribute("user.id")
    provider = ProviderType.CREDENTIALS
    provider_subject_id = factory.SelfAttribute("user.email")


class RefreshTokenFactory(BaseFactory):
    class Meta:
        model = RefreshToken

    user_id = factory.LazyFunction(lambda: UserFactory().id)
    token_hash = factory.Sequence(lambda n: f"{n:064x}")
    expires_at = factory.LazyFunction(lambda: datetime.now(UTC) + timedelta(days=7))
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))
