"""Standalone image upload; the returned reference feeds post create/update."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from feed.services._shared.base import BaseService, ServiceContext
from feed.services._shared.errors import ValidationFailedError, Violation
from feed.services._shared.ports.image_store import (
    ImageFile,
    ImageStore,
    UnsupportedImageError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImageOut:
    image_url: str


class ImageService(BaseService):
    """Store uploaded images for authenticated callers."""

    def __init__(self, *, ctx: ServiceContext | None = None, images: ImageStore) -> None:
        super().__init__(ctx=ctx)
        self.images = images

    def upload(self, file: ImageFile | None) -> ImageOut:
        """
        Store ``file`` and return its reference.

        :raises UnauthenticatedError: Anonymous caller.
        :raises ValidationFailedError: Missing file or unsupported type (field ``image``).
        """
        actor_id = self.require_authenticated()
        if file is None:
            raise ValidationFailedError([Violation(field="image", reason="No image provided.")])
        try:
            reference = self.images.store(file)
        except UnsupportedImageError as exc:
            raise ValidationFailedError([Violation(field="image", reason=str(exc))]) from exc
        logger.info("Image stored", extra={"image_url": reference, "user_id": actor_id})
        return ImageOut(image_url=reference)
