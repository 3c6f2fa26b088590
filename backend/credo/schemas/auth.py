"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

# Hash inputs beyond 72 bytes are silently truncated by some algorithms
PASSWORD_LENGTH = validate.Length(min=8, max=72)


class RegisterSchema(Schema):
    """Input payload for account registration."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=PASSWORD_LENGTH)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=72))


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=128))


class EmailSchema(Schema):
    """Single-email payload (resend verification, dev token lookup)."""

    email = fields.Email(required=True, validate=validate.Length(max=254))


class VerifyEmailQuerySchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1, max=128))


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    expires_at = fields.DateTime(required=True)
    token_type = fields.String(dump_default="bearer")


class UserSchema(Schema):
    id = fields.String(required=True)
    name = fields.String(required=True)
    email = fields.Email(required=True)
    email_verified_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(allow_none=True)


class WhoAmISchema(Schema):
    """Identity carried by the presented access token."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
