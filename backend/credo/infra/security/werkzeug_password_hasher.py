from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from credo.services._shared.errors import PasswordHashingError
from credo.services._shared.ports import PasswordHasher


@dataclass(slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Password hasher backed by :mod:`werkzeug.security`.

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or
        ``"pbkdf2:sha256:600000"``.
    """

    method: str = "scrypt"

    def hash(self, raw: str) -> str:
        if not isinstance(raw, str) or not raw:
            raise PasswordHashingError("Password must be a non-empty string.")
        try:
            return generate_password_hash(raw, method=self.method)
        except (ValueError, TypeError) as exc:
            raise PasswordHashingError(f"Unsupported hash method {self.method!r}") from exc

    def verify(self, raw: str, hashed: str) -> bool:
        if not hashed or not isinstance(raw, str):
            return False
        # ``check_password_hash`` is not typed and returns ``Any``; coerce to bool for mypy.
        return bool(check_password_hash(hashed, raw))
