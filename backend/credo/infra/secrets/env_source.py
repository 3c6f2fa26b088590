"""Environment-variable credential source for local development."""

from __future__ import annotations

import os
from collections.abc import Mapping

from credo.services._shared.deadline import Deadline
from credo.services._shared.errors import CredentialSourceError
from credo.services._shared.ports import CredentialSource

DEFAULT_VARIABLE = "DB_CREDENTIALS_JSON"


class EnvCredentialSource(CredentialSource):
    """
    Returns the secret JSON blob stored in an environment variable.

    Re-read on every fetch so that a changed variable is picked up after the
    cache expires.

    :param variable: Variable name holding the JSON blob.
    :param environ: Mapping to read from (defaults to ``os.environ``).
    """

    def __init__(
        self, variable: str = DEFAULT_VARIABLE, *, environ: Mapping[str, str] | None = None
    ) -> None:
        self.variable = variable
        self._environ = environ if environ is not None else os.environ

    def fetch(self, *, deadline: Deadline | None = None) -> str:
        value = self._environ.get(self.variable, "")
        if not value.strip():
            raise CredentialSourceError(f"environment variable {self.variable} is empty")
        return value
