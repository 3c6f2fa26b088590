"""Authentication endpoints using the service layer."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, g, request

from credo.api.deps import (
    get_token_service,
    json_response,
    request_deadline,
    require_auth,
    timing,
)
from credo.core.errors import APIError, NotFound
from credo.schemas import (
    EmailSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
    VerifyEmailQuerySchema,
    WhoAmISchema,
)
from credo.services._shared.errors import InvalidCredentialsError, UnknownIdentityError
from credo.services.auth import LoginIn, RefreshIn, RegisterIn

log = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
email_schema = EmailSchema()
verify_query_schema = VerifyEmailQuerySchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()
whoami_schema = WhoAmISchema()

RESEND_MESSAGE = "If the account exists and is unverified, a verification email has been sent."


@bp.post("/register")
@timing
def register():
    """Create an unverified account and send the verification email."""

    data = register_schema.load(request.get_json(silent=True) or {})
    result = get_token_service().register(RegisterIn(**data))
    body = {
        "data": user_schema.dump(result.user),
        "meta": {
            "email_verification_required": current_app.config.get(
                "REQUIRE_EMAIL_VERIFICATION", True
            )
        },
    }
    return json_response(body, status=201)


@bp.get("/verify-email")
@timing
def verify_email():
    args = verify_query_schema.load(request.args)
    user = get_token_service().verify_email(args["token"])
    return json_response({"data": user_schema.dump(user)})


@bp.post("/resend-verification")
@timing
def resend_verification():
    """Re-send the verification email.

    Unknown emails get the same response as a successful send.
    """

    data = email_schema.load(request.get_json(silent=True) or {})
    try:
        get_token_service().resend_verification(data["email"])
    except UnknownIdentityError:
        log.info("auth.resend_unknown_email")
    return json_response({"data": {"message": RESEND_MESSAGE}})


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = get_token_service().login(LoginIn(**data), deadline=request_deadline())
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    try:
        pair = get_token_service().refresh_tokens(
            RefreshIn(refresh_token=data["refresh_token"]), deadline=request_deadline()
        )
    except InvalidCredentialsError:
        raise APIError(
            "Invalid or expired refresh token", status_code=401, code="token_invalid"
        ) from None
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke every refresh token of the caller."""

    get_token_service().logout(g.user_id, deadline=request_deadline())
    return "", 204


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the identity carried by the access token."""

    return json_response({"data": whoami_schema.dump({"id": g.user_id, "email": g.email})})


@bp.post("/dev/verification-token")
@timing
def dev_verification_token():
    """Return the pending verification token (development only)."""

    if not current_app.config.get("EXPOSE_DEV_ENDPOINTS", False):
        raise NotFound(f"Route '{request.path}' not found")
    data = email_schema.load(request.get_json(silent=True) or {})
    token = get_token_service().pending_verification_token(data["email"])
    return json_response({"data": {"email": data["email"], "verification_token": token}})
