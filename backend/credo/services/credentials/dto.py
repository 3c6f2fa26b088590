# credo/services/credentials/dto.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.engine import URL

from credo.services._shared.errors import CredentialSourceError

_REQUIRED_STR = ("host", "username", "password", "dbname")


@dataclass(frozen=True, slots=True)
class DBCredentials:
    """
    Database connection credentials read from the secret store.

    :param host: Database host.
    :type host: str
    :param port: TCP port.
    :type port: int
    :param username: Login role.
    :type username: str
    :param password: Login password. Excluded from ``repr()``.
    :type password: str
    :param dbname: Database name.
    :type dbname: str
    """

    host: str
    port: int
    username: str
    password: str = field(repr=False)
    dbname: str

    @classmethod
    def from_json(cls, raw: str) -> DBCredentials:
        """
        Parse the secret blob.

        Expected shape: ``{"dbname", "host", "password", "port", "username"}``
        with ``port`` an integer. Unknown keys are ignored.

        :raises CredentialSourceError: On empty, malformed or incomplete input.
        """
        if not raw or not raw.strip():
            raise CredentialSourceError("secret value is empty")
        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CredentialSourceError("secret value is not valid JSON") from exc
        if not isinstance(data, dict):
            raise CredentialSourceError("secret value must be a JSON object")

        missing = [k for k in (*_REQUIRED_STR, "port") if k not in data]
        if missing:
            raise CredentialSourceError(f"secret is missing keys: {', '.join(sorted(missing))}")
        for key in _REQUIRED_STR:
            if not isinstance(data[key], str):
                raise CredentialSourceError(f"secret key {key!r} must be a string")
        port = data["port"]
        if isinstance(port, bool) or not isinstance(port, int):
            raise CredentialSourceError("secret key 'port' must be an integer")

        return cls(
            host=data["host"],
            port=port,
            username=data["username"],
            password=data["password"],
            dbname=data["dbname"],
        )

    def to_url(self, *, sslmode: str | None = None) -> URL:
        """SQLAlchemy URL for PostgreSQL via psycopg 3."""
        query = {"sslmode": sslmode} if sslmode else {}
        return URL.create(
            drivername="postgresql+psycopg",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.dbname,
            query=query,
        )

    def connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments understood by ``psycopg.connect``."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.username,
            "password": self.password,
            "dbname": self.dbname,
        }

    def masked(self) -> dict[str, Any]:
        """Loggable view: password hidden."""
        return {
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "password": "***",
            "dbname": self.dbname,
        }
