"""Writer-preferring reader/writer lock built on :class:`threading.Condition`."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """
    Many concurrent readers or one writer.

    Waiting writers block new readers, so a steady stream of readers cannot
    starve a refresh. Not reentrant: a thread holding the read side must not
    request the write side.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def _wait(self, predicate, timeout: float | None) -> bool:
        if timeout is None:
            self._cond.wait_for(predicate)
            return True
        end = time.monotonic() + timeout
        while not predicate():
            remaining = end - time.monotonic()
            if remaining <= 0:
                return False
            self._cond.wait(remaining)
        return True

    def acquire_read(self, timeout: float | None = None) -> bool:
        with self._cond:
            ok = self._wait(lambda: not self._writer and self._writers_waiting == 0, timeout)
            if ok:
                self._readers += 1
            return ok

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() without a matching acquire")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: float | None = None) -> bool:
        with self._cond:
            self._writers_waiting += 1
            try:
                ok = self._wait(lambda: not self._writer and self._readers == 0, timeout)
            finally:
                self._writers_waiting -= 1
            if ok:
                self._writer = True
            else:
                # Readers parked behind this writer may proceed now.
                self._cond.notify_all()
            return ok

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() without a matching acquire")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self, timeout: float | None = None) -> Iterator[None]:
        """:raises TimeoutError: If the lock is not acquired within ``timeout``."""
        if not self.acquire_read(timeout):
            raise TimeoutError("timed out waiting for read lock")
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self, timeout: float | None = None) -> Iterator[None]:
        """:raises TimeoutError: If the lock is not acquired within ``timeout``."""
        if not self.acquire_write(timeout):
            raise TimeoutError("timed out waiting for write lock")
        try:
            yield
        finally:
            self.release_write()
