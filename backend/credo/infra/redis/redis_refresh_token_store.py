# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError, WatchError  # type: ignore[import-untyped]

from credo.services._shared.errors import (
    DuplicateTokenHashError,
    StorageError,
    TokenNotFoundError,
)
from credo.services._shared.ports import RefreshTokenRecord, RefreshTokenStore


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh-token store.

    Layout
    ------
    - ``rt:h:<hash>``: hash with ``id``, ``user_id``, ``expires_at``,
      ``created_at`` and, once revoked, ``revoked_at`` (ISO-8601 UTC).
    - ``rt:id:<id>``: string pointing at the token hash.
    - ``rt:u:<user_id>``: set of token hashes issued to the user.

    Keys expire with the token, so expired tokens eventually read as unknown.
    Conditional writes use WATCH/MULTI/EXEC (optimistic locking).

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"rt:h:{token_hash}"

    @staticmethod
    def _kid(token_id: str) -> str:
        return f"rt:id:{token_id}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _ttl(expires_at: datetime) -> int:
        return max(1, int((expires_at - datetime.now(UTC)).total_seconds()) + 1)

    @staticmethod
    def _s(value: bytes | str | None) -> str | None:
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes | bytearray) else str(value)

    def _record(self, h: dict) -> RefreshTokenRecord:
        def _f(name: str) -> str | None:
            return self._s(h.get(name.encode()) or h.get(name))

        revoked = _f("revoked_at")
        return RefreshTokenRecord(
            id=_f("id") or "",
            user_id=_f("user_id") or "",
            token_hash=_f("token_hash") or "",
            expires_at=datetime.fromisoformat(_f("expires_at") or ""),
            created_at=datetime.fromisoformat(_f("created_at") or ""),
            revoked_at=datetime.fromisoformat(revoked) if revoked else None,
        )

    def _revoke_key(self, key: str, now: datetime) -> bool:
        """Set ``revoked_at`` on ``key`` if it exists and is unrevoked."""
        with self.r.pipeline() as p:
            while True:
                try:
                    p.watch(key)
                    if not p.exists(key) or p.hexists(key, "revoked_at"):
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "revoked_at", now.isoformat())
                    p.execute()
                    return True
                except WatchError:
                    # Concurrent modification detected; re-read and retry
                    continue

    # -------------------- API ------------------------

    def create(self, record: RefreshTokenRecord) -> None:
        key = self._k(record.token_hash)
        ttl = self._ttl(record.expires_at)
        mapping = {
            "id": record.id,
            "user_id": record.user_id,
            "token_hash": record.token_hash,
            "expires_at": record.expires_at.isoformat(),
            "created_at": record.created_at.isoformat(),
        }
        if record.revoked_at is not None:
            mapping["revoked_at"] = record.revoked_at.isoformat()
        try:
            with self.r.pipeline() as p:
                while True:
                    try:
                        p.watch(key)
                        if p.exists(key):
                            p.unwatch()
                            raise DuplicateTokenHashError()
                        p.multi()
                        p.hset(key, mapping=mapping)
                        p.expire(key, ttl)
                        p.set(self._kid(record.id), record.token_hash, ex=ttl)
                        p.sadd(self._ku(record.user_id), record.token_hash)
                        p.expire(self._ku(record.user_id), ttl)
                        p.execute()
                        return
                    except WatchError:
                        continue
        except RedisError as exc:
            raise StorageError("refresh_token.create", type(exc).__name__) from exc

    def get_by_hash(self, token_hash: str) -> RefreshTokenRecord:
        try:
            h = self.r.hgetall(self._k(token_hash))
        except RedisError as exc:
            raise StorageError("refresh_token.get_by_hash", type(exc).__name__) from exc
        if not h:
            raise TokenNotFoundError()
        return self._record(h)

    def revoke(self, token_id: str, *, now: datetime) -> None:
        try:
            token_hash = self._s(self.r.get(self._kid(token_id)))
            revoked = token_hash is not None and self._revoke_key(self._k(token_hash), now)
        except RedisError as exc:
            raise StorageError("refresh_token.revoke", type(exc).__name__) from exc
        if not revoked:
            raise TokenNotFoundError()

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        key_u = self._ku(user_id)
        count = 0
        try:
            for member in self.r.smembers(key_u):
                token_hash = self._s(member)
                key = self._k(token_hash)
                if self._revoke_key(key, now):
                    count += 1
                elif not self.r.exists(key):
                    # Expired away; drop the dangling index entry
                    self.r.srem(key_u, member)
        except RedisError as exc:
            raise StorageError("refresh_token.revoke_all", type(exc).__name__) from exc
        return count
