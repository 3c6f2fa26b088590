# credo/services/auth/service.py
from __future__ import annotations

import hashlib
import logging
import secrets
from uuid import uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from credo.models.auth_provider import ProviderType, UserAuthProvider
from credo.models.base import as_utc
from credo.models.user import User, normalize_email
from credo.services._shared.base import BaseService
from credo.services._shared.deadline import Deadline, check_deadline
from credo.services._shared.errors import (
    AlreadyVerifiedError,
    DuplicateIdentityError,
    EmailDeliveryError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidVerificationTokenError,
    StorageError,
    TokenNotFoundError,
    UnknownIdentityError,
    violates,
)
from credo.services._shared.ports.mailer import VerificationEmail, VerificationMailer
from credo.services._shared.ports.password_hasher import PasswordHasher
from credo.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
)
from credo.services._shared.ports.token_provider import TokenProvider
from credo.services.auth.dto import (
    AuthTokenConfig,
    Identity,
    LoginIn,
    RefreshIn,
    RegisterIn,
    RegistrationOut,
    TokenPairOut,
    UserOut,
)

log = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 32
VERIFICATION_TOKEN_BYTES = 32

# Verified against on unknown emails so both branches pay for one hash check.
_DUMMY_PASSWORD = "credo-timing-equalizer"


def hash_refresh_token(raw: str) -> str:
    """Lowercase hex SHA-256 of a raw refresh token."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def generate_refresh_token() -> str:
    """256 bits from the OS CSPRNG, hex-encoded (64 chars)."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def generate_verification_token() -> str:
    return secrets.token_urlsafe(VERIFICATION_TOKEN_BYTES)


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        email_verified_at=as_utc(user.email_verified_at),
        created_at=as_utc(user.created_at),
    )


class TokenLifecycleService(BaseService):
    """
    Authentication lifecycle service.

    Registration and email verification, login, refresh-token rotation,
    logout (bulk revocation) and stateless access-token validation.

    Refresh tokens are opaque random strings; only their SHA-256 digest is
    handed to the :class:`RefreshTokenStore`. Rotation revokes the consumed
    token before the replacement is issued, so a client that never receives
    the new pair still cannot replay the old token.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        refresh_store: RefreshTokenStore,
        hasher: PasswordHasher,
        mailer: VerificationMailer,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for signing/verifying access tokens.
        :param refresh_store: Stateful store for refresh-token records.
        :param hasher: Password hasher (opaque).
        :param mailer: Verification-email sender.
        :param token_cfg: Lifetimes and verification policy.
        """
        super().__init__()
        self.tokens = token_provider
        self.refresh_store = refresh_store
        self.hasher = hasher
        self.mailer = mailer
        self.cfg = token_cfg or AuthTokenConfig()
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Registration & verification
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegistrationOut:
        """
        Create an unverified user with a ``credentials`` provider link.

        :param dto: Registration input.
        :returns: The created user and the raw verification token.
        :raises DuplicateIdentityError: If the email is taken (tombstones included).
        :raises PasswordHashingError: If the hasher fails.
        :raises StorageError: On persistence failure.
        """
        email = normalize_email(dto.email)
        password_hash = self.hasher.hash(dto.password)
        token = generate_verification_token()
        expires_at = self.now_utc() + self.cfg.verification_expires

        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(email, include_deleted=True):
                    raise DuplicateIdentityError(email)
                user = User(name=dto.name, email=email, password_hash=password_hash)
                user.set_verification_token(token, expires_at)
                uow.users.add(user)
                uow.auth_providers.add(
                    UserAuthProvider(
                        user_id=user.id,
                        provider=ProviderType.CREDENTIALS,
                        provider_subject_id=email,
                    )
                )
        except IntegrityError as exc:
            if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                raise DuplicateIdentityError(email) from exc
            raise StorageError("register", type(exc).__name__) from exc
        except SQLAlchemyError as exc:
            raise StorageError("register", type(exc).__name__) from exc

        out = _user_out(user)
        log.info("auth.register user_id=%s", out.id)
        self._send_verification(out.email, out.name, token)
        return RegistrationOut(user=out, verification_token=token)

    def verify_email(self, token: str) -> UserOut:
        """
        Consume a verification token.

        :raises InvalidVerificationTokenError: Unknown, empty, consumed or expired token.
        """
        if not token:
            raise InvalidVerificationTokenError()
        now = self.now_utc()
        try:
            with self.rw_uow() as uow:
                user = uow.users.get_by_verification_token(token)
                if user is None or user.verification_expired(now):
                    raise InvalidVerificationTokenError()
                user.mark_email_verified(now)
        except SQLAlchemyError as exc:
            raise StorageError("verify_email", type(exc).__name__) from exc
        log.info("auth.email_verified user_id=%s", user.id)
        return _user_out(user)

    def resend_verification(self, email: str) -> str:
        """
        Rotate the pending verification token and mail it again.

        The previous token stops working immediately.

        :returns: The new raw token.
        :raises UnknownIdentityError: No live user with this email.
        :raises AlreadyVerifiedError: The user is already verified.
        """
        normalized = normalize_email(email)
        token = generate_verification_token()
        expires_at = self.now_utc() + self.cfg.verification_expires
        try:
            with self.rw_uow() as uow:
                user = uow.users.get_by_email(normalized)
                if user is None:
                    raise UnknownIdentityError(normalized)
                if user.is_email_verified:
                    raise AlreadyVerifiedError()
                user.set_verification_token(token, expires_at)
                name = user.name
        except SQLAlchemyError as exc:
            raise StorageError("resend_verification", type(exc).__name__) from exc
        self._send_verification(normalized, name, token)
        return token

    def pending_verification_token(self, email: str) -> str:
        """
        Return the outstanding verification token for ``email``.

        Development aid; callers must gate it outside production.

        :raises UnknownIdentityError: No live user with this email.
        :raises AlreadyVerifiedError: Nothing is pending.
        """
        normalized = normalize_email(email)
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(normalized)
            if user is None:
                raise UnknownIdentityError(normalized)
            if user.is_email_verified or not user.email_verification_token:
                raise AlreadyVerifiedError()
            return user.email_verification_token

    # ------------------------------------------------------------------ #
    # Login / refresh / logout
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :raises InvalidCredentialsError: Unknown email or wrong password.
        :raises EmailNotVerifiedError: When verification is enforced and pending.
        """
        email = normalize_email(dto.email)
        check_deadline(deadline, "login.lookup")
        try:
            with self.ro_uow() as uow:
                user = uow.users.get_by_email(email)
                if user is None:
                    self.hasher.verify(dto.password, self._timing_hash())
                    raise InvalidCredentialsError()
                if not self.hasher.verify(dto.password, user.password_hash):
                    raise InvalidCredentialsError()
                if self.cfg.require_verified_email and not user.is_email_verified:
                    raise EmailNotVerifiedError()
                identity = Identity(user_id=user.id, email=user.email)
        except SQLAlchemyError as exc:
            raise StorageError("login", type(exc).__name__) from exc

        pair = self._issue_token_pair(identity, deadline=deadline)
        log.info("auth.login user_id=%s", identity.user_id)
        return pair

    def refresh_tokens(
        self, dto: RefreshIn, *, deadline: Deadline | None = None
    ) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Unknown, revoked, expired and concurrently consumed tokens all raise
        the same :class:`InvalidCredentialsError`.
        """
        if not dto.refresh_token:
            raise InvalidCredentialsError()
        now = self.now_utc()

        check_deadline(deadline, "refresh.lookup")
        try:
            record = self.refresh_store.get_by_hash(hash_refresh_token(dto.refresh_token))
        except TokenNotFoundError:
            raise InvalidCredentialsError() from None
        if not record.is_usable(now):
            raise InvalidCredentialsError()

        check_deadline(deadline, "refresh.revoke")
        try:
            self.refresh_store.revoke(record.id, now=now)
        except TokenNotFoundError:
            log.warning("auth.refresh_race_lost token_id=%s", record.id)
            raise InvalidCredentialsError() from None

        try:
            with self.ro_uow() as uow:
                user = uow.users.get(record.user_id)
                if user is None or user.is_deleted:
                    raise InvalidCredentialsError()
                if self.cfg.require_verified_email and not user.is_email_verified:
                    raise EmailNotVerifiedError()
                identity = Identity(user_id=user.id, email=user.email)
        except SQLAlchemyError as exc:
            raise StorageError("refresh", type(exc).__name__) from exc

        pair = self._issue_token_pair(identity, deadline=deadline)
        log.info("auth.refresh user_id=%s rotated_token_id=%s", identity.user_id, record.id)
        return pair

    def logout(self, user_id: str, *, deadline: Deadline | None = None) -> int:
        """
        Revoke every active refresh token of ``user_id``. Idempotent.

        :returns: Number of tokens revoked by this call.
        """
        check_deadline(deadline, "logout.revoke_all")
        count = self.refresh_store.revoke_all_for_user(user_id, now=self.now_utc())
        log.info("auth.logout user_id=%s revoked=%d", user_id, count)
        return count

    def validate_access_token(self, token: str) -> tuple[str, str]:
        """
        Stateless access-token check.

        :returns: ``(user_id, email)``.
        :raises InvalidTokenError: Bad signature/algorithm/type, or expired.
        """
        claims = self.tokens.decode_access_token(token)
        return claims.subject, claims.email

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_token_pair(
        self, identity: Identity, *, deadline: Deadline | None = None
    ) -> TokenPairOut:
        access, expires_at = self.tokens.create_access_token(
            subject=identity.user_id,
            email=identity.email,
            expires_delta=self.cfg.access_expires,
        )
        raw_refresh = generate_refresh_token()
        now = self.now_utc()
        record = RefreshTokenRecord(
            id=str(uuid4()),
            user_id=identity.user_id,
            token_hash=hash_refresh_token(raw_refresh),
            expires_at=now + self.cfg.refresh_expires,
            created_at=now,
        )
        check_deadline(deadline, "issue.store_refresh_token")
        self.refresh_store.create(record)
        return TokenPairOut(
            access_token=access, refresh_token=raw_refresh, expires_at=expires_at
        )

    def _timing_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_hash

    def _send_verification(self, email: str, name: str, token: str) -> None:
        try:
            self.mailer.send_verification(
                VerificationEmail(to_address=email, name=name, token=token)
            )
        except EmailDeliveryError as exc:
            log.warning("auth.verification_email_failed to=%s error=%s", email, exc)
