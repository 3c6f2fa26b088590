"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from credo.core.errors import Unauthorized
from credo.core.wiring import get_token_service
from credo.services._shared.deadline import Deadline
from credo.services._shared.errors import InvalidTokenError
from credo.services._shared.ports import TokenValidator

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def request_deadline() -> Deadline | None:
    """Per-request deadline from ``REQUEST_DEADLINE_SECONDS`` (``0`` disables)."""

    seconds = float(current_app.config.get("REQUEST_DEADLINE_SECONDS", 0) or 0)
    return Deadline.after(seconds) if seconds > 0 else None


def bearer_token() -> str:
    """Extract the bearer token from ``Authorization`` or raise 401."""

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise Unauthorized("Missing bearer token", code="token_missing")
    token = header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized("Missing bearer token", code="token_missing")
    return token


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token.

    Sets ``g.user_id`` and ``g.email`` from the token claims. No database
    lookup is performed.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        validator: TokenValidator = get_token_service()
        try:
            g.user_id, g.email = validator.validate_access_token(bearer_token())
        except InvalidTokenError:
            raise Unauthorized("Invalid or expired token", code="token_invalid") from None
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


__all__ = [
    "bearer_token",
    "get_token_service",
    "json_response",
    "request_deadline",
    "require_auth",
    "timing",
]
