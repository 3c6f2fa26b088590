from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way password hashing with a constant-time verify."""

    def hash(self, raw: str) -> str:
        """
        Produce a salted hash of ``raw``.

        :raises PasswordHashingError: When the backend fails.
        """

    def verify(self, raw: str, hashed: str) -> bool:
        """Return True if ``raw`` matches ``hashed``. Never raises on mismatch."""


class PlainTextPasswordHasher(PasswordHasher):
    """Reversible fake hasher for unit tests. Never use outside tests."""

    PREFIX = "plain$"

    def __init__(self) -> None:
        self.verify_calls = 0

    def hash(self, raw: str) -> str:
        return f"{self.PREFIX}{raw}"

    def verify(self, raw: str, hashed: str) -> bool:
        self.verify_calls += 1
        return hashed == f"{self.PREFIX}{raw}"
