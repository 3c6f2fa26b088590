from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from credo.services._shared.errors import DuplicateTokenHashError, TokenNotFoundError


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Persisted view of an issued refresh token.

    Only the SHA-256 hex digest of the raw token is ever stored.

    :ivar id: Record identifier (UUID string).
    :ivar user_id: Owner user id.
    :ivar token_hash: Lowercase hex SHA-256 of the raw token.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar created_at: Issuance time (UTC).
    :ivar revoked_at: Revocation time, ``None`` while active.
    """

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    created_at: datetime
    revoked_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_usable(self, now: datetime) -> bool:
        """Active means neither revoked nor expired at ``now``."""
        return not self.is_revoked and not self.is_expired(now)


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh-token records.

    Implementations raise :class:`StorageError` for backend failures. Revocation
    MUST be a conditional update on "not yet revoked" so that two concurrent
    rotations of the same token cannot both succeed.
    """

    def create(self, record: RefreshTokenRecord) -> None:
        """
        Persist a brand-new record.

        :raises DuplicateTokenHashError: If ``record.token_hash`` already exists.
        """

    def get_by_hash(self, token_hash: str) -> RefreshTokenRecord:
        """
        Look up a record by token hash, whatever its state.

        :raises TokenNotFoundError: If no record has this hash.
        """

    def revoke(self, token_id: str, *, now: datetime) -> None:
        """
        Revoke a single record if it is not already revoked.

        :raises TokenNotFoundError: If no unrevoked record with this id exists.
        """

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        """
        Revoke every unrevoked record of ``user_id``.

        :returns: Number of records affected (zero is not an error).
        """


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh-token store with atomic conditional revocation.

    .. note::
       Uses a threading lock to simulate atomicity in unit tests.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, RefreshTokenRecord] = {}
        self._hash_by_id: dict[str, str] = {}
        self._by_user: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def create(self, record: RefreshTokenRecord) -> None:
        with self._lock:
            if record.token_hash in self._by_hash:
                raise DuplicateTokenHashError()
            self._by_hash[record.token_hash] = record
            self._hash_by_id[record.id] = record.token_hash
            self._by_user.setdefault(record.user_id, set()).add(record.token_hash)

    def get_by_hash(self, token_hash: str) -> RefreshTokenRecord:
        with self._lock:
            record = self._by_hash.get(token_hash)
        if record is None:
            raise TokenNotFoundError()
        return record

    def revoke(self, token_id: str, *, now: datetime) -> None:
        with self._lock:
            token_hash = self._hash_by_id.get(token_id)
            record = self._by_hash.get(token_hash) if token_hash else None
            if record is None or record.is_revoked:
                raise TokenNotFoundError()
            self._by_hash[record.token_hash] = replace(record, revoked_at=now)

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        count = 0
        with self._lock:
            for token_hash in self._by_user.get(user_id, set()):
                record = self._by_hash[token_hash]
                if not record.is_revoked:
                    self._by_hash[token_hash] = replace(record, revoked_at=now)
                    count += 1
        return count
