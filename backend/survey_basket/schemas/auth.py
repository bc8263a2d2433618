"""Authentication-related Marshmallow schemas (camelCase on the wire)."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload exchanging a refresh token for a new pair."""

    access_token = fields.String(
        required=True, data_key="accessToken", validate=validate.Length(min=1)
    )
    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1, max=128)
    )


class RevokeSchema(Schema):
    """Input payload revoking one of the caller's refresh tokens."""

    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1, max=128)
    )


class AuthResponseSchema(Schema):
    """Response payload carrying the caller's identity and a token pair."""

    id = fields.Integer(attribute="user_id", required=True)
    email = fields.Email(required=True)
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    access_token = fields.String(required=True, data_key="accessToken")
    expires_in = fields.Integer(required=True, data_key="expiresIn")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    refresh_token_expiration = fields.AwareDateTime(
        required=True, data_key="refreshTokenExpiration", format="iso"
    )
    token_type = fields.Constant("Bearer", data_key="tokenType")
