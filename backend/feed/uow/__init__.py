"""Unit of Work abstractions and the SQLAlchemy implementations."""

from .base import UnitOfWork
from .sqlalchemy_uow import (
    ReadOnlyViolation,
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

__all__ = [
    "ReadOnlyViolation",
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
