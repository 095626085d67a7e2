from __future__ import annotations

from typing import IO, Protocol


class UnsupportedImageError(ValueError):
    """Raised when an upload is missing or not an accepted image type."""


class ImageFile(Protocol):
    """Minimal view of an uploaded file (matches ``werkzeug.FileStorage``)."""

    filename: str | None
    mimetype: str
    stream: IO[bytes]

    def save(self, dst: str) -> None: ...


class ImageStore(Protocol):
    """
    Abstraction for storing post images outside the primary database.

    ``delete`` is best-effort: implementations log failures and never raise
    to the caller.
    """

    def store(self, file: ImageFile) -> str: ...
    def delete(self, reference: str) -> None: ...


class InMemoryImageStore(ImageStore):
    """Keep references in a dict; records every delete call."""

    def __init__(self, *, prefix: str = "images") -> None:
        self.prefix = prefix
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self._seq = 0

    def store(self, file: ImageFile) -> str:
        if file is None or not file.filename:
            raise UnsupportedImageError("No image provided.")
        self._seq += 1
        reference = f"{self.prefix}/{self._seq}-{file.filename}"
        self.files[reference] = file.stream.read()
        return reference

    def delete(self, reference: str) -> None:
        self.deleted.append(reference)
        self.files.pop(reference, None)
