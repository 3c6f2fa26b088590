# tests/unit/services/test_credential_cache.py
from __future__ import annotations

import json
import threading
import time
from datetime import timedelta

import pytest
from credo.services._shared.deadline import Deadline
from credo.services._shared.errors import CredentialSourceError, DeadlineExceededError
from credo.services._shared.ports import ScriptedCredentialSource
from credo.services.credentials import CredentialCache, DBCredentials

SECRET = json.dumps(
    {
        "dbname": "credo",
        "host": "db.internal",
        "password": "s3cret",
        "port": 5432,
        "username": "credo_app",
    }
)
ROTATED = json.dumps(
    {
        "dbname": "credo",
        "host": "db.internal",
        "password": "rotated",
        "port": 5432,
        "username": "credo_app",
    }
)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BlockingSource:
    """Blocks inside ``fetch`` until released."""

    def __init__(self, value: str = SECRET) -> None:
        self.value = value
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def fetch(self, *, deadline=None) -> str:
        self.calls += 1
        self.entered.set()
        self.release.wait(5)
        return self.value


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


class TestCaching:
    def test_many_reads_one_fetch(self, clock):
        source = ScriptedCredentialSource([SECRET])
        cache = CredentialCache(source, ttl=300, clock=clock)

        results = [cache.get_credentials() for _ in range(5)]

        assert source.calls == 1
        assert all(r.password == "s3cret" for r in results)
        assert cache.is_populated()

    def test_refetches_after_ttl(self, clock):
        source = ScriptedCredentialSource([SECRET, ROTATED])
        cache = CredentialCache(source, ttl=timedelta(minutes=5), clock=clock)

        cache.get_credentials()
        clock.advance(299)
        assert cache.get_credentials().password == "s3cret"
        clock.advance(1)
        assert cache.get_credentials().password == "rotated"
        assert source.calls == 2

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_disables_cache(self, clock, ttl):
        source = ScriptedCredentialSource([SECRET])
        cache = CredentialCache(source, ttl=ttl, clock=clock)

        cache.get_credentials()
        cache.get_credentials()

        assert not cache.enabled
        assert source.calls == 2
        assert not cache.is_populated()

    def test_returns_independent_copies(self, clock):
        cache = CredentialCache(ScriptedCredentialSource([SECRET]), ttl=300, clock=clock)

        first = cache.get_credentials()
        second = cache.get_credentials()

        assert first == second
        assert first is not second

    def test_invalidate_forces_fetch(self, clock):
        source = ScriptedCredentialSource([SECRET, ROTATED])
        cache = CredentialCache(source, ttl=300, clock=clock)
        cache.get_credentials()

        cache.invalidate()

        assert not cache.is_populated()
        assert cache.get_credentials().password == "rotated"


class TestRetry:
    def test_single_failure_is_retried_transparently(self, clock):
        source = ScriptedCredentialSource([CredentialSourceError("throttled"), SECRET])
        cache = CredentialCache(source, ttl=300, clock=clock)

        creds = cache.get_credentials()

        assert creds.host == "db.internal"
        assert source.calls == 2

    def test_two_failures_propagate_and_leave_cache_empty(self, clock):
        source = ScriptedCredentialSource(
            [CredentialSourceError("first"), CredentialSourceError("second"), SECRET]
        )
        cache = CredentialCache(source, ttl=300, clock=clock)

        with pytest.raises(CredentialSourceError, match="second"):
            cache.get_credentials()
        assert not cache.is_populated()

        # No stuck failure state: the next call starts from scratch
        assert cache.get_credentials().password == "s3cret"
        assert source.calls == 3

    def test_malformed_secret_counts_as_failure(self, clock):
        source = ScriptedCredentialSource(["{not json", SECRET])
        cache = CredentialCache(source, ttl=300, clock=clock)

        assert cache.get_credentials().username == "credo_app"
        assert source.calls == 2

    def test_failed_refresh_drops_stale_entry(self, clock):
        source = ScriptedCredentialSource(
            [SECRET, CredentialSourceError("a"), CredentialSourceError("b")]
        )
        cache = CredentialCache(source, ttl=10, clock=clock)
        cache.get_credentials()
        clock.advance(11)

        with pytest.raises(CredentialSourceError):
            cache.get_credentials()
        assert not cache.is_populated()

    def test_retry_does_not_extend_the_deadline(self, clock):
        deadline = Deadline(expires_at=clock() + 1, clock=clock)

        class SlowFailingSource:
            calls = 0

            def fetch(self, *, deadline=None):
                self.calls += 1
                clock.advance(2)
                raise CredentialSourceError("timeout")

        source = SlowFailingSource()
        cache = CredentialCache(source, ttl=300, clock=clock)

        with pytest.raises(DeadlineExceededError):
            cache.get_credentials(deadline=deadline)
        assert source.calls == 1

    def test_deadline_errors_are_not_retried(self, clock):
        source = ScriptedCredentialSource([DeadlineExceededError("fetch"), SECRET])
        cache = CredentialCache(source, ttl=300, clock=clock)

        with pytest.raises(DeadlineExceededError):
            cache.get_credentials()
        assert source.calls == 1

    def test_expired_deadline_skips_fetch(self, clock):
        source = ScriptedCredentialSource([SECRET])
        cache = CredentialCache(source, ttl=300, clock=clock)

        with pytest.raises(DeadlineExceededError):
            cache.get_credentials(deadline=Deadline(expires_at=clock() - 1, clock=clock))
        assert source.calls == 0


class TestConcurrency:
    def test_burst_of_readers_triggers_one_fetch(self):
        source = BlockingSource()
        cache = CredentialCache(source, ttl=300)
        results: list[DBCredentials] = []
        errors: list[BaseException] = []

        def _reader():
            try:
                results.append(cache.get_credentials())
            except BaseException as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=_reader) for _ in range(16)]
        for t in threads:
            t.start()
        assert source.entered.wait(5)
        time.sleep(0.05)
        source.release.set()
        for t in threads:
            t.join(5)

        assert not errors
        assert len(results) == 16
        assert source.calls == 1

    def test_waiting_for_refresh_honours_deadline(self):
        source = BlockingSource()
        cache = CredentialCache(source, ttl=300)
        holder = threading.Thread(target=cache.get_credentials)
        holder.start()
        try:
            assert source.entered.wait(5)
            with pytest.raises(DeadlineExceededError):
                cache.get_credentials(deadline=Deadline.after(0.05))
        finally:
            source.release.set()
            holder.join(5)
        assert source.calls == 1
