# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from typing import Final


class _Unset:
    """Marker type for "value not supplied" (distinct from ``None`` or ``""``)."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True, slots=True)
class PaginationIn:
    """
    Input pagination contract.

    :param page: 1-based page number; values ``<= 0`` or ``None`` mean page 1.
    :type page: int | None
    """

    page: int | None = 1

    @property
    def normalized_page(self) -> int:
        if self.page is None or self.page < 1:
            return 1
        return int(self.page)


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param page: Current page (1-based).
    :type page: int
    :param limit: Page size.
    :type limit: int
    :param total: Total rows available.
    :type total: int
    :param has_prev: Whether a previous page exists.
    :type has_prev: bool
    :param has_next: Whether a next page exists.
    :type has_next: bool
    """

    page: int
    limit: int
    total: int
    has_prev: bool
    has_next: bool

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> PageMeta:
        return cls(
            page=page,
            limit=limit,
            total=total,
            has_prev=page > 1,
            has_next=page * limit < total,
        )
