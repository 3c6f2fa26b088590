"""
Caller-supplied deadlines.

A :class:`Deadline` is an absolute point on the monotonic clock. Operations
that may block (lock waits, network calls) accept an optional deadline and
check it between stages. ``None`` means "no deadline".
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from credo.services._shared.errors import DeadlineExceededError


@dataclass(frozen=True, slots=True)
class Deadline:
    """
    Absolute monotonic deadline.

    :param expires_at: Monotonic timestamp after which the deadline is expired.
    :type expires_at: float
    :param clock: Monotonic clock used for comparisons (injectable for tests).
    """

    expires_at: float
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def after(
        cls, seconds: float, *, clock: Callable[[], float] = time.monotonic
    ) -> Deadline:
        """Build a deadline ``seconds`` from now."""
        return cls(expires_at=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        """Seconds left before expiry, never negative."""
        return max(0.0, self.expires_at - self.clock())

    @property
    def expired(self) -> bool:
        return self.clock() >= self.expires_at

    def check(self, operation: str) -> None:
        """
        Raise if the deadline has passed.

        :param operation: Name of the stage about to run (used in the error).
        :raises DeadlineExceededError: When expired.
        """
        if self.expired:
            raise DeadlineExceededError(operation)


def check_deadline(deadline: Deadline | None, operation: str) -> None:
    """Check ``deadline`` if one was supplied."""
    if deadline is not None:
        deadline.check(operation)
