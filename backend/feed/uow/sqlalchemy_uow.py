"""Units of work over the Flask-SQLAlchemy scoped session."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session

from feed.core.extensions import db
from feed.repositories import PostRepository, UserRepository
from feed.uow.base import UnitOfWork


class ReadOnlyViolation(RuntimeError):
    """A read-only unit of work was asked to write."""


class SQLAlchemyRepositoryContainer:
    """``users`` and ``posts`` repositories sharing one session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.posts = PostRepository(session=session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write transaction: commit when the block exits cleanly, otherwise
    roll back and let the exception propagate.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except BaseException:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Query-only transaction.

    While the block is open any flush carrying pending changes raises
    :class:`ReadOnlyViolation`; on exit the transaction is always rolled back.
    The rollback expires loaded instances, so map them to DTOs inside the block.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._listening = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        event.listen(self.session, "before_flush", self._block_flush)
        self._listening = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            if self._listening:
                event.remove(self.session, "before_flush", self._block_flush)
                self._listening = False

    @staticmethod
    def _block_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise ReadOnlyViolation("Read-only UnitOfWork: ORM flush blocked (pending changes present).")

    def commit(self) -> None:
        raise ReadOnlyViolation("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
