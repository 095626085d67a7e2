"""Authentication-related Marshmallow schemas.

Input schemas check request *shape* only; business rules (email format,
password length, blank names) are enforced by the identity service so that
every violation is reported together.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.String(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(max=128))
    name = fields.String(required=True, validate=validate.Length(max=100))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.String(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(max=128))


class TokenResponseSchema(Schema):
    """Response payload containing an identity token."""

    token = fields.String(required=True)
    user_id = fields.Integer(required=True)
