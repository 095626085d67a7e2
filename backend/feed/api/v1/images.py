"""Image upload endpoint."""

from __future__ import annotations

from flask import Blueprint

from feed.api.deps import image_service, json_response, timing, uploaded_image
from feed.schemas import ImageSchema

bp = Blueprint("images", __name__)

image_schema = ImageSchema()


@bp.post("")
@timing
def upload_image():
    """Store the multipart ``image`` part and return its reference."""
    result = image_service().upload(uploaded_image())
    return json_response({"data": image_schema.dump(result)}, status=201)
