"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_load, validate


class RegisterSchema(Schema):
    """Multipart form fields for account registration.

    Presence checks live in the service so missing fields produce the same
    error whatever the transport.
    """

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(
        data_key="fullName", load_default=None, validate=validate.Length(max=100)
    )
    email = fields.String(load_default=None, validate=validate.Length(max=254))
    username = fields.String(load_default=None, validate=validate.Length(max=50))
    password = fields.String(load_default=None, validate=validate.Length(max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user by username or email."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default=None, validate=validate.Length(max=254))
    username = fields.String(load_default=None, validate=validate.Length(max=50))
    password = fields.String(load_default=None, validate=validate.Length(max=128))


class RefreshSchema(Schema):
    """JSON body fallback for the refresh token (the cookie wins).

    Anything other than a string counts as no token, so the endpoint answers
    401 rather than a payload validation error.
    """

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.Raw(data_key="refreshToken", load_default=None)

    @post_load
    def _strings_only(self, data, **kwargs):
        if not isinstance(data.get("refresh_token"), str):
            data["refresh_token"] = None
        return data


class TokenPairSchema(Schema):
    """Response payload carrying both tokens."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
