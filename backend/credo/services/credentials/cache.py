# credo/services/credentials/cache.py
from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import timedelta

from credo.services._shared.deadline import Deadline, check_deadline
from credo.services._shared.errors import DeadlineExceededError
from credo.services._shared.ports.credential_source import CredentialSource
from credo.services.credentials.dto import DBCredentials
from credo.services.credentials.rwlock import ReadWriteLock

log = logging.getLogger(__name__)


class CredentialCache:
    """
    TTL cache for database credentials in front of a :class:`CredentialSource`.

    States: empty, populated, stale. A single entry is held with an absolute
    expiry of ``fetch_time + ttl``.

    * Warm reads take only the shared side of a reader/writer lock.
    * A miss takes the exclusive side and re-checks before fetching, so a
      burst of callers hitting an expired entry triggers one fetch.
    * A failed fetch drops the entry and is retried once, within the caller's
      deadline. A second failure propagates unchanged and leaves the cache
      empty.
    * Every value handed out is a fresh copy.
    * ``ttl <= 0`` disables caching; every call goes to the source.

    Build one per process (app factory) and pass it to whoever needs it.
    """

    def __init__(
        self,
        source: CredentialSource,
        ttl: timedelta | float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        :param source: Secret source returning the raw JSON blob.
        :param ttl: Entry lifetime (``timedelta`` or seconds).
        :param clock: Monotonic clock (injectable for tests).
        """
        self._source = source
        self._ttl = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        self._clock = clock
        self._lock = ReadWriteLock()
        self._entry: DBCredentials | None = None
        self._expires_at = 0.0

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def is_populated(self) -> bool:
        """True if a non-expired entry is cached."""
        with self._lock.read_locked():
            return self._valid(self._clock())

    def get_credentials(self, *, deadline: Deadline | None = None) -> DBCredentials:
        """
        Return a copy of the current credentials, fetching if needed.

        :param deadline: Optional caller deadline for lock waits and fetches.
        :raises CredentialSourceError: When the source fails twice in a row.
        :raises DeadlineExceededError: When the deadline expires first.
        """
        if not self.enabled:
            return self._load(deadline)

        try:
            with self._lock.read_locked(timeout=self._lock_timeout(deadline)):
                if self._valid(self._clock()):
                    return replace(self._entry)

            with self._lock.write_locked(timeout=self._lock_timeout(deadline)):
                if self._valid(self._clock()):
                    return replace(self._entry)
                return self._refresh(deadline)
        except TimeoutError:
            raise DeadlineExceededError("credential_cache.lock") from None

    def invalidate(self) -> None:
        """Drop the cached entry so the next read fetches."""
        with self._lock.write_locked():
            self._entry = None
            self._expires_at = 0.0
        log.info("credential_cache.invalidated")

    # ------------------------------------------------------------------ #
    # Internals (write lock held)
    # ------------------------------------------------------------------ #

    @staticmethod
    def _lock_timeout(deadline: Deadline | None) -> float | None:
        return deadline.remaining() if deadline is not None else None

    def _valid(self, now: float) -> bool:
        return self._entry is not None and now < self._expires_at

    def _refresh(self, deadline: Deadline | None) -> DBCredentials:
        self._entry = None
        self._expires_at = 0.0
        try:
            creds = self._load(deadline)
        except DeadlineExceededError:
            raise
        except Exception as exc:
            log.warning(
                "credential_cache.fetch_failed retrying=true error=%s", type(exc).__name__
            )
            first_error = exc
        else:
            return self._store(creds)

        if deadline is not None and deadline.expired:
            raise DeadlineExceededError("credential_cache.retry") from first_error
        # A second failure surfaces as-is.
        return self._store(self._load(deadline))

    def _store(self, creds: DBCredentials) -> DBCredentials:
        self._entry = replace(creds)
        self._expires_at = self._clock() + self._ttl
        log.info(
            "credential_cache.refreshed host=%s ttl_seconds=%s", creds.host, self._ttl
        )
        return replace(creds)

    def _load(self, deadline: Deadline | None) -> DBCredentials:
        check_deadline(deadline, "credential_source.fetch")
        raw = self._source.fetch(deadline=deadline)
        return DBCredentials.from_json(raw)
