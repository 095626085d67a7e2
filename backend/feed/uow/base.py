"""Transaction boundary shared by the service layer."""

from __future__ import annotations

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    One service step's transaction, used as a context manager.

    Implementations hand out the ``users`` and ``posts`` repositories bound to
    a single session and decide on exit whether that session is committed.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
