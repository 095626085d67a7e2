"""Shared API helpers: caller identity, service wiring and response shaping."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from marshmallow import Schema

from feed.core.logger import ensure_request_id
from feed.core.notifications import get_channel
from feed.core.storage import get_image_store
from feed.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from feed.schemas import PageQuerySchema
from feed.services import (
    ANONYMOUS,
    IdentityService,
    ImageService,
    PaginationIn,
    PostService,
    ServiceContext,
    resolve_identity,
)
from feed.services._shared.identity import Identity
from feed.services._shared.ports import ImageFile

F = TypeVar("F", bound=Callable[..., Any])

page_query_schema = PageQuerySchema()


# ------------------------------ Identity ---------------------------------- #


def resolve_request_identity() -> None:
    """``before_request`` hook storing the caller identity on ``g.identity``.

    Runs once per request; invalid credentials degrade to anonymous and the
    operations decide whether that is acceptable.
    """
    g.identity = resolve_identity(request.headers.get("Authorization"), JWTTokenProvider())


def current_identity() -> Identity:
    return getattr(g, "identity", ANONYMOUS)


def service_context() -> ServiceContext:
    """Build the request-scoped service context."""
    return ServiceContext(identity=current_identity(), request_id=ensure_request_id())


# ------------------------------ Service wiring ---------------------------- #


def post_service() -> PostService:
    return PostService(
        ctx=service_context(),
        images=get_image_store(),
        channel=get_channel(),
        page_size=int(current_app.config.get("POSTS_PER_PAGE", 10)),
    )


def identity_service() -> IdentityService:
    return IdentityService(
        ctx=service_context(),
        token_provider=JWTTokenProvider(),
        token_ttl=current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
    )


def image_service() -> ImageService:
    return ImageService(ctx=service_context(), images=get_image_store())


# ------------------------------ Request parsing --------------------------- #


def parse_page() -> PaginationIn:
    """Parse ``?page=`` into a :class:`PaginationIn`."""
    data = page_query_schema.load(request.args)
    return PaginationIn(page=data["page"])


def load_body(schema: Schema) -> dict[str, Any]:
    """Load a JSON body, or multipart/form fields when the request is a form."""
    if request.mimetype in ("multipart/form-data", "application/x-www-form-urlencoded"):
        return schema.load(request.form)
    return schema.load(request.get_json(silent=True) or {})


def uploaded_image(field: str = "image") -> ImageFile | None:
    """Return the uploaded file part named ``field`` if one was sent."""
    file = request.files.get(field)
    if file is None or not file.filename:
        return None
    return file


# ------------------------------ Responses --------------------------------- #


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
