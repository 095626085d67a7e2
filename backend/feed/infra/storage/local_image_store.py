"""Store uploaded post images on the local filesystem."""

from __future__ import annotations

import logging
import os
from uuid import uuid4

from werkzeug.utils import secure_filename

from feed.services._shared.ports import ImageFile, ImageStore, UnsupportedImageError

logger = logging.getLogger(__name__)

ALLOWED_MIMETYPES = frozenset({"image/png", "image/jpg", "image/jpeg"})


class LocalImageStore(ImageStore):
    """
    Write images under ``root`` with random names.

    References have the shape ``"<prefix>/<file name>"`` so they can be served
    by a static file handler mounted at ``prefix``.
    """

    def __init__(self, root: str, *, prefix: str = "images") -> None:
        self.root = root
        self.prefix = prefix.strip("/")

    def store(self, file: ImageFile) -> str:
        if file is None or not file.filename:
            raise UnsupportedImageError("No image provided.")
        if file.mimetype not in ALLOWED_MIMETYPES:
            raise UnsupportedImageError("Only PNG and JPEG images are accepted.")

        _, ext = os.path.splitext(secure_filename(file.filename))
        name = f"{uuid4().hex}{ext.lower()}"
        os.makedirs(self.root, exist_ok=True)
        file.save(os.path.join(self.root, name))
        reference = f"{self.prefix}/{name}"
        logger.info("Image stored", extra={"image_url": reference})
        return reference

    def path_for(self, reference: str) -> str | None:
        """Map a reference back to a file path inside ``root`` (or ``None``)."""
        name = secure_filename(os.path.basename(reference or ""))
        if not name:
            return None
        return os.path.join(self.root, name)

    def delete(self, reference: str) -> None:
        path = self.path_for(reference)
        if path is None:
            logger.warning("Image reference not resolvable", extra={"image_url": reference})
            return
        try:
            os.remove(path)
        except OSError:
            # Best-effort: the database record is the source of truth
            logger.warning("Image deletion failed", extra={"image_url": reference}, exc_info=True)
            return
        logger.info("Image deleted", extra={"image_url": reference})
