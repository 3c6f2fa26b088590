# tests/unit/services/test_rwlock.py
from __future__ import annotations

import threading

import pytest
from credo.services.credentials.rwlock import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    assert lock.acquire_read(timeout=0.1)
    assert lock.acquire_read(timeout=0.1)
    lock.release_read()
    lock.release_read()


def test_writer_excludes_readers_and_writers():
    lock = ReadWriteLock()
    assert lock.acquire_write(timeout=0.1)

    assert not lock.acquire_read(timeout=0.05)
    assert not lock.acquire_write(timeout=0.05)

    lock.release_write()
    assert lock.acquire_read(timeout=0.1)
    lock.release_read()


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    lock.acquire_read()
    writer_done = threading.Event()

    def _writer():
        with lock.write_locked():
            writer_done.set()

    t = threading.Thread(target=_writer)
    t.start()
    try:
        # The writer is queued behind the first reader; newcomers must wait.
        for _ in range(50):
            if lock._writers_waiting:
                break
            threading.Event().wait(0.01)
        assert not lock.acquire_read(timeout=0.05)
    finally:
        lock.release_read()
        t.join(5)
    assert writer_done.is_set()


def test_timed_out_writer_lets_readers_through():
    lock = ReadWriteLock()
    lock.acquire_read()

    assert not lock.acquire_write(timeout=0.05)
    assert lock.acquire_read(timeout=0.05)

    lock.release_read()
    lock.release_read()


@pytest.mark.parametrize("method", ["release_read", "release_write"])
def test_unbalanced_release_raises(method):
    with pytest.raises(RuntimeError):
        getattr(ReadWriteLock(), method)()


def test_context_managers_raise_timeout():
    lock = ReadWriteLock()
    with lock.write_locked():
        with pytest.raises(TimeoutError):
            with lock.read_locked(timeout=0.01):
                pass  # pragma: no cover
