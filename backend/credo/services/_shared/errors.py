"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories,
storage adapters, domain models and application services.

The translation to HTTP responses (RFC 7807) is handled by
``credo/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the error message. SQLite only
    reports the offending columns, so callers may pass a column fragment
    (``users.email``) as a fallback.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint name or column fragment to match.
    :returns: True if the IntegrityError matches.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    - The API layer translates them to ``APIError`` responses.
    """

    pass


# --------------------------------------------------------------------------- #
# Authentication outcomes
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """
    Raised for every credential or refresh-token rejection.

    Unknown email, wrong password, and unknown, expired, revoked or
    concurrently consumed refresh tokens all surface as this single error.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class EmailNotVerifiedError(ServiceError):
    """Raised when a correct login targets an account with an unverified email."""

    def __init__(self, message: str = "Email verification required") -> None:
        super().__init__(message)


class InvalidVerificationTokenError(ServiceError):
    """Raised when a verification token is unknown, empty or expired."""

    def __init__(self, message: str = "Invalid or expired verification token") -> None:
        super().__init__(message)


class AlreadyVerifiedError(ServiceError):
    """Raised when a verification resend targets an already verified account."""

    def __init__(self, message: str = "Email is already verified") -> None:
        super().__init__(message)


class InvalidTokenError(ServiceError):
    """Raised when an access token fails signature, algorithm, type or expiry checks."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


@dataclass(slots=True, eq=False)
class DuplicateIdentityError(ServiceError):
    """
    Raised when a registration targets an email that is already taken.

    Soft-deleted accounts still reserve their email.

    :param email: The normalized email that collided.
    :type email: str
    """

    email: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Email already registered: {self.email}"


@dataclass(slots=True, eq=False)
class UnknownIdentityError(ServiceError):
    """
    Raised when an operation targets an email with no live account.

    :param email: The normalized email that was looked up.
    :type email: str
    """

    email: str

    def __str__(self) -> str:  # pragma: no cover
        return f"User not found: {self.email}"


class PasswordHashingError(ServiceError):
    """Raised when the password hasher fails to produce a hash."""


# --------------------------------------------------------------------------- #
# Infrastructure-facing errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True, eq=False)
class StorageError(ServiceError):
    """
    Raised when a persistence backend fails.

    :param operation: Short name of the failing operation.
    :type operation: str
    :param detail: Optional low-level detail (never contains secrets).
    :type detail: str
    """

    operation: str
    detail: str = ""

    def __str__(self) -> str:  # pragma: no cover
        suffix = f": {self.detail}" if self.detail else ""
        return f"Storage failure during {self.operation}{suffix}"


class TokenNotFoundError(ServiceError):
    """Raised by refresh-token stores when no matching live record exists."""

    def __init__(self, message: str = "Refresh token not found") -> None:
        super().__init__(message)


class DuplicateTokenHashError(ServiceError):
    """Raised by refresh-token stores when a token hash is already present."""

    def __init__(self, message: str = "Refresh token hash already stored") -> None:
        super().__init__(message)


@dataclass(slots=True, eq=False)
class CredentialSourceError(ServiceError):
    """
    Raised when the secret source cannot produce usable database credentials.

    :param reason: Human-readable reason. Never includes the secret value.
    :type reason: str
    """

    reason: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Credential source failure: {self.reason}"


@dataclass(slots=True, eq=False)
class DeadlineExceededError(ServiceError):
    """
    Raised when a caller-supplied deadline expires before an operation completes.

    :param operation: The stage that was about to run or was waiting.
    :type operation: str
    """

    operation: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Deadline exceeded during {self.operation}"


class EmailDeliveryError(ServiceError):
    """Raised by mailers when a verification email cannot be handed off."""
