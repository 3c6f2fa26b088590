# tests/unit/services/test_db_credentials.py
from __future__ import annotations

import json

import pytest
from credo.services._shared.errors import CredentialSourceError
from credo.services.credentials import DBCredentials

VALID = {
    "dbname": "credo",
    "host": "db.internal",
    "password": "s3cret",
    "port": 5432,
    "username": "credo_app",
}


def test_parses_secret_blob_and_ignores_extra_keys():
    creds = DBCredentials.from_json(json.dumps({**VALID, "engine": "postgres"}))

    assert creds == DBCredentials(
        host="db.internal", port=5432, username="credo_app", password="s3cret", dbname="credo"
    )


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "{broken",
        "[]",
        json.dumps({k: v for k, v in VALID.items() if k != "host"}),
        json.dumps({**VALID, "port": "5432"}),
        json.dumps({**VALID, "port": True}),
        json.dumps({**VALID, "password": None}),
    ],
)
def test_rejects_malformed_blobs(raw):
    with pytest.raises(CredentialSourceError):
        DBCredentials.from_json(raw)


def test_password_never_shows_in_repr_or_masked_view():
    creds = DBCredentials.from_json(json.dumps(VALID))

    assert "s3cret" not in repr(creds)
    assert creds.masked()["password"] == "***"


def test_url_and_connect_kwargs():
    creds = DBCredentials.from_json(json.dumps(VALID))

    url = creds.to_url(sslmode="require")
    assert url.drivername == "postgresql+psycopg"
    assert url.password == "s3cret"
    assert url.query["sslmode"] == "require"
    assert creds.connect_kwargs() == {
        "host": "db.internal",
        "port": 5432,
        "user": "credo_app",
        "password": "s3cret",
        "dbname": "credo",
    }
