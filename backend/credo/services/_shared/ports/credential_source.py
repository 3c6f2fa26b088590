from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from credo.services._shared.errors import CredentialSourceError

if TYPE_CHECKING:
    from credo.services._shared.deadline import Deadline


class CredentialSource(Protocol):
    """
    Port for the remote secret holding database credentials.

    ``fetch`` returns the raw secret string (a JSON document). It must honour
    ``deadline`` and raise :class:`CredentialSourceError` on any failure,
    including an empty secret.
    """

    def fetch(self, *, deadline: Deadline | None = None) -> str: ...


class ScriptedCredentialSource(CredentialSource):
    """
    Test double that replays a script of secret values and failures.

    Each item is either a string (returned) or an exception (raised). When the
    script is exhausted the last item repeats.
    """

    def __init__(self, script: Iterable[str | Exception]) -> None:
        self._script = list(script)
        if not self._script:
            raise ValueError("script must not be empty")
        self._lock = threading.Lock()
        self.calls = 0

    def fetch(self, *, deadline: Deadline | None = None) -> str:
        with self._lock:
            index = min(self.calls, len(self._script) - 1)
            self.calls += 1
            item = self._script[index]
        if isinstance(item, Exception):
            raise item
        if not item:
            raise CredentialSourceError("secret value is empty")
        return item
