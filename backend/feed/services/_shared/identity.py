"""Caller identity resolved by the authorization gate.

An identity is either :class:`Anonymous` or :class:`Authenticated`. The gate
never rejects a request; each operation decides whether anonymous callers are
acceptable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class Anonymous:
    """No usable credential accompanied the request."""

    @property
    def is_authenticated(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Authenticated:
    """
    Caller proved possession of a valid identity token.

    :param user_id: Subject user id taken from the verified token.
    :type user_id: int
    """

    user_id: int

    @property
    def is_authenticated(self) -> bool:
        return True


Identity: TypeAlias = Anonymous | Authenticated

ANONYMOUS = Anonymous()
