from feed.services.images.service import ImageOut, ImageService

__all__ = ["ImageOut", "ImageService"]
