"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields

from feed.services._shared.dto import PageMeta


class PageQuerySchema(Schema):
    """Parse the ``page`` query parameter.

    Non-positive values are accepted here and normalized to page 1 by the
    service layer.
    """

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1)


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    has_prev = fields.Boolean(required=True)
    has_next = fields.Boolean(required=True)


def build_meta(meta: PageMeta) -> dict[str, object]:
    """Return a ``meta`` mapping for paginated responses."""
    return MetaSchema().dump(meta)
