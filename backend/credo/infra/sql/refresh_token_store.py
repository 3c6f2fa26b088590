# comments in English; reST docstrings
from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from credo.models.refresh_token import RefreshToken
from credo.services._shared.errors import (
    DuplicateTokenHashError,
    StorageError,
    TokenNotFoundError,
    violates,
)
from credo.services._shared.ports import RefreshTokenRecord, RefreshTokenStore
from credo.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh-token store backed by the ``refresh_tokens`` table.

    Each call runs in its own unit of work so a revocation is
    committed before the caller issues a replacement token.
    """

    def create(self, record: RefreshTokenRecord) -> None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                uow.refresh_tokens.add(RefreshToken.from_record(record))
        except IntegrityError as exc:
            if violates(exc, "uq_refresh_tokens_token_hash") or violates(
                exc, "refresh_tokens.token_hash"
            ):
                raise DuplicateTokenHashError() from exc
            raise StorageError("refresh_token.create", type(exc).__name__) from exc
        except SQLAlchemyError as exc:
            raise StorageError("refresh_token.create", type(exc).__name__) from exc

    def get_by_hash(self, token_hash: str) -> RefreshTokenRecord:
        try:
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                row = uow.refresh_tokens.get_by_hash(token_hash)
                record = row.to_record() if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError("refresh_token.get_by_hash", type(exc).__name__) from exc
        if record is None:
            raise TokenNotFoundError()
        return record

    def revoke(self, token_id: str, *, now: datetime) -> None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                updated = uow.refresh_tokens.revoke(token_id, now=now)
        except SQLAlchemyError as exc:
            raise StorageError("refresh_token.revoke", type(exc).__name__) from exc
        if updated != 1:
            raise TokenNotFoundError()

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                return uow.refresh_tokens.revoke_all_for_user(user_id, now=now)
        except SQLAlchemyError as exc:
            raise StorageError("refresh_token.revoke_all", type(exc).__name__) from exc
