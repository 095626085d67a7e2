"""Shared persistence plumbing for the SQLAlchemy 2.x repositories.

A repository only reads and stages changes on the session; committing and
rolling back belong to the Unit of Work. Subclasses declare their public
sort, filter and update keys as whitelists, so request data can never reach
an arbitrary column.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from feed.core.extensions import db

E = TypeVar("E")

Column = InstrumentedAttribute[Any]


@dataclass(slots=True)
class Pagination:
    """Page request: 1-based ``page``, page size ``limit`` and sort tokens.

    Sort tokens are public field names, prefixed with ``-`` for descending
    order (``["-created_at", "-id"]``).
    """

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    """Entities of one page together with the unpaged row count."""

    items: Sequence[E]
    total: int
    page: int
    limit: int


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, Column],
    tokens: Iterable[str],
    *,
    pk_attr: Column | None,
) -> Select[Any]:
    """Translate sort tokens into ``ORDER BY`` clauses.

    Tokens naming fields outside ``sortable_fields`` are skipped. The primary
    key is appended ascending unless a token already orders by it, which keeps
    page boundaries stable between requests.
    """
    clauses: list[Any] = []
    for token in tokens:
        descending = token.startswith("-")
        column = sortable_fields.get(token.lstrip("-").strip())
        if column is None:
            continue
        clauses.append(column.desc() if descending else column.asc())
        if column is pk_attr:
            pk_attr = None
    if pk_attr is not None:
        clauses.append(pk_attr.asc())
    return stmt.order_by(*clauses) if clauses else stmt


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
    with_total: bool = True,
) -> tuple[list[Any], int]:
    """Run ``stmt`` for a single page.

    :returns: ``(items, total)``. ``total`` counts every row ``stmt`` matches
        (ordering removed) and is ``0`` when ``with_total`` is false.
    """
    page, limit = max(int(page), 1), max(int(limit), 1)
    total = 0
    if with_total:
        counted = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = session.execute(counted).scalar_one()
    window = stmt.limit(limit).offset((page - 1) * limit)
    return list(session.execute(window).unique().scalars()), int(total)


class BaseRepository(Generic[E]):
    """Persistence-only access to one mapped ``model``.

    Override the ``_sortable_fields``, ``_filterable_fields`` and
    ``_updatable_fields`` whitelists and ``_default_eagerload`` as needed.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The injected session, else the Flask-scoped ``db.session``."""
        return self._session if self._session is not None else cast(Session, db.session)

    # Hooks

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _pk_attr(self) -> Column | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, Column]:
        return {}

    def _filterable_fields(self) -> Mapping[str, Column]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    # Statement building

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any] | None) -> Select[Any]:
        """Add equality conditions for whitelisted ``filters`` keys."""
        columns = self._filterable_fields()
        for key, value in (filters or {}).items():
            if key in columns:
                stmt = stmt.where(columns[key] == value)
        return stmt

    def _query(self, filters: Mapping[str, Any] | None, sort: Iterable[str]) -> Select[Any]:
        stmt = self._default_eagerload(self._where(select(self.model), filters))
        return apply_sorting(stmt, self._sortable_fields(), sort, pk_attr=self._pk_attr())

    # Writes

    def flush(self) -> None:
        self.session.flush()

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so it receives its id and timestamps."""
        self.session.add(instance)
        self.flush()
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        """Set whitelisted attributes on ``instance`` and flush.

        Attributes are assigned one by one so the model's ``@validates``
        hooks apply.

        :raises ValueError: A key is not in ``_updatable_fields``.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        for name, value in fields.items():
            setattr(instance, name, value)
        self.flush()
        return instance

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def delete_by_id(self, entity_id: Any) -> bool:
        """Delete by primary key; ``False`` when no such row exists."""
        instance = self.get(entity_id)
        if instance is None:
            return False
        self.delete(instance)
        return True

    # Reads

    def get(self, entity_id: Any) -> E | None:
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError(f"{type(self).__name__} has no primary key attribute.")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, self.session.execute(stmt).unique().scalars().first())

    def count(self, *, filters: Mapping[str, Any] | None = None) -> int:
        stmt = self._where(select(func.count()).select_from(self.model), filters)
        return int(self.session.execute(stmt).scalar_one())

    def exists(self, **filters: Any) -> bool:
        return self.count(filters=filters) > 0

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[E]:
        """Return matching entities in whitelisted sort order."""
        stmt = self._query(filters, sort or ())
        if limit is not None:
            stmt = stmt.limit(int(limit))
        if offset is not None:
            stmt = stmt.offset(int(offset))
        return list(self.session.execute(stmt).unique().scalars())

    def paginate(
        self,
        pagination: Pagination,
        *,
        filters: Mapping[str, Any] | None = None,
        with_total: bool = True,
    ) -> Page[E]:
        """Return the requested :class:`Page` in a deterministic order."""
        items, total = paginate_select(
            self.session,
            self._query(filters, pagination.sort),
            page=pagination.page,
            limit=pagination.limit,
            with_total=with_total,
        )
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)
