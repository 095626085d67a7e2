"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. Each one carries a fixed :class:`ErrorKind` tag and
a structured payload, so callers branch on ``exc.kind`` instead of poking at
ad hoc attributes.

The translation to HTTP responses (RFC 7807) is handled by
``feed/core/errors.py``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


class ErrorKind(str, Enum):
    """Closed set of failure classifications surfaced by services."""

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``kind`` is fixed per subclass; ``payload()`` returns the structured
      details safe to expose to clients.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL

    def payload(self) -> dict[str, Any]:
        """Return structured, client-safe details for this error."""
        return {}


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class UnauthenticatedError(ServiceError):
    """Raised when an operation requires an authenticated caller."""

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = "Not authenticated.") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when the caller is authenticated but does not own the resource."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str = "Not authorized!") -> None:
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class Violation:
    """
    A single field constraint that was not met.

    :param field: Offending input field.
    :type field: str
    :param reason: Human-readable explanation.
    :type reason: str
    """

    field: str
    reason: str


class ValidationFailedError(ServiceError):
    """
    Raised when one or more input constraints are unmet.

    All violations are collected before raising; the error never describes
    only the first problem found.
    """

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, violations: Iterable[Violation], message: str = "Validation failed.") -> None:
        super().__init__(message)
        self.violations: list[Violation] = list(violations)

    @property
    def fields(self) -> list[str]:
        return [v.field for v in self.violations]

    def payload(self) -> dict[str, Any]:
        return {"violations": [{"field": v.field, "reason": v.reason} for v in self.violations]}


@dataclass(slots=True, eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Post").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    kind: ClassVar[ErrorKind] = ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True, eq=False)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    :param message: Optional client-facing message overriding the default.
    :type message: str | None
    """

    entity: str
    detail: str
    message: str | None = None

    kind: ClassVar[ErrorKind] = ErrorKind.CONFLICT

    def __str__(self) -> str:
        return self.message or f"Conflict on {self.entity}: {self.detail}"


class InternalError(ServiceError):
    """
    Raised when a store/infrastructure step fails after a mutation started.

    No compensating rollback is attempted for earlier, already committed
    steps.
    """

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "Internal error.") -> None:
        super().__init__(message)


class ViolationCollector:
    """Accumulate :class:`Violation` entries and raise them together."""

    def __init__(self) -> None:
        self._items: list[Violation] = []

    def add(self, field: str, reason: str) -> None:
        self._items.append(Violation(field=field, reason=reason))

    def min_length(self, field: str, value: str | None, minimum: int) -> None:
        if value is None or len(value.strip()) < minimum:
            self.add(field, f"Must be at least {minimum} characters long.")

    def not_blank(self, field: str, value: str | None) -> None:
        if value is None or not value.strip():
            self.add(field, "Must not be empty.")

    def __bool__(self) -> bool:
        return bool(self._items)

    def raise_if_any(self) -> None:
        if self._items:
            raise ValidationFailedError(self._items)
