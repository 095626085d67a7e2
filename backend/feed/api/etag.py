"""ETag helpers for post representations."""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import Any

from flask import Response, request


def generate_etag(entity: Any) -> str | None:
    """Hash ``id`` and ``updated_at`` of ``entity`` into a strong ETag.

    Returns ``None`` when the entity has no ``id``.
    """
    identifier = getattr(entity, "id", None)
    if identifier is None:
        return None
    updated_at: datetime | None = getattr(entity, "updated_at", None)
    payload = f"{identifier}:{updated_at.isoformat() if updated_at else ''}".encode()
    return hashlib.sha256(payload).hexdigest()


def set_response_etag(response: Response, entity: Any) -> Response:
    """Attach an ``ETag`` header and honour ``If-None-Match`` (304)."""
    value = generate_etag(entity)
    if value is None:
        return response
    response.set_etag(value)
    if request.method == "GET" and value in request.if_none_match:
        response.status_code = 304
        response.set_data(b"")
    return response
