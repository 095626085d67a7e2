"""Post endpoints: feed listing and the post lifecycle."""

from __future__ import annotations

from flask import Blueprint

from feed.api.deps import (
    json_response,
    load_body,
    parse_page,
    post_service,
    timing,
    uploaded_image,
)
from feed.api.etag import set_response_etag
from feed.schemas import PostInputSchema, PostSchema, build_meta
from feed.services import UNSET, PostCreateIn, PostUpdateIn

bp = Blueprint("posts", __name__)

post_schema = PostSchema()
post_list_schema = PostSchema(many=True)
post_input_schema = PostInputSchema()


@bp.get("")
@timing
def list_posts():
    """Return one page of the feed (anonymous access allowed)."""
    result = post_service().list(parse_page())
    body = {
        "data": post_list_schema.dump(result.posts),
        "total_count": result.total_count,
        "meta": build_meta(result.meta),
    }
    return json_response(body)


@bp.get("/<int:post_id>")
@timing
def get_post(post_id: int):
    post = post_service().get(post_id)
    response = json_response({"data": post_schema.dump(post)})
    return set_response_etag(response, post)


@bp.post("")
@timing
def create_post():
    """Create a post from JSON or from a multipart form with an ``image`` file."""
    data = load_body(post_input_schema)
    dto = PostCreateIn(
        title=data["title"],
        content=data["content"],
        image_url=data.get("image_url"),
    )
    post = post_service().create(dto, image=uploaded_image())
    response = json_response({"data": post_schema.dump(post)}, status=201)
    return set_response_etag(response, post)


@bp.put("/<int:post_id>")
@timing
def update_post(post_id: int):
    """Update a post; omitting ``image_url`` and ``image`` keeps the current image."""
    data = load_body(post_input_schema)
    dto = PostUpdateIn(
        post_id=post_id,
        title=data["title"],
        content=data["content"],
        image_url=data.get("image_url", UNSET),
    )
    post = post_service().update(dto, image=uploaded_image())
    response = json_response({"data": post_schema.dump(post)})
    return set_response_etag(response, post)


@bp.delete("/<int:post_id>")
@timing
def delete_post(post_id: int):
    post_service().delete(post_id)
    return json_response({"data": {"id": post_id, "deleted": True}})
