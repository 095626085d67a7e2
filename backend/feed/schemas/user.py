"""User-facing Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class UserSchema(Schema):
    """Public representation of a user (never exposes the password hash)."""

    id = fields.Integer(dump_only=True)
    email = fields.String(dump_only=True)
    name = fields.String(dump_only=True)
    status = fields.String(dump_only=True)


class StatusSchema(Schema):
    """Status line, both as input and as response payload."""

    status = fields.String(required=True, validate=validate.Length(max=500))
