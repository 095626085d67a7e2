"""Image store lifecycle bound to the Flask application."""

from __future__ import annotations

from typing import cast

from flask import Flask, current_app

from feed.infra.storage.local_image_store import LocalImageStore
from feed.services._shared.ports import ImageStore

EXTENSION_KEY = "image_store"


def init_app(app: Flask) -> None:
    """Register a :class:`LocalImageStore` rooted at ``UPLOAD_FOLDER``."""
    app.extensions[EXTENSION_KEY] = LocalImageStore(
        app.config["UPLOAD_FOLDER"],
        prefix=app.config.get("IMAGE_URL_PREFIX", "images"),
    )


def get_image_store(app: Flask | None = None) -> ImageStore:
    """Return the image store registered on ``app`` (defaults to the current app)."""
    target = app or current_app
    try:
        return cast(ImageStore, target.extensions[EXTENSION_KEY])
    except KeyError as exc:
        raise RuntimeError("Image store is not initialized. Call init_app() first.") from exc
