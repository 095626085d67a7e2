"""Post and image Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class CreatorSchema(Schema):
    id = fields.Integer(dump_only=True)
    name = fields.String(dump_only=True)


class PostSchema(Schema):
    """Output representation of a post with its embedded creator."""

    id = fields.Integer(dump_only=True)
    title = fields.String(dump_only=True)
    content = fields.String(dump_only=True)
    image_url = fields.String(dump_only=True)
    creator = fields.Nested(CreatorSchema, dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)


class PostInputSchema(Schema):
    """Input payload for creating or updating a post.

    Accepted as JSON or as multipart form fields. ``image_url`` may be
    omitted when an ``image`` file part is uploaded, or on update to keep the
    current image. Unknown keys (e.g. an echoed ``id`` or ``creator``) are
    ignored.
    """

    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(max=255))
    content = fields.String(required=True)
    image_url = fields.String(validate=validate.Length(max=512))


class ImageSchema(Schema):
    image_url = fields.String(dump_only=True)
