# feed/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass, field

from feed.services._shared.errors import AuthorizationError, UnauthenticatedError
from feed.services._shared.identity import ANONYMOUS, Authenticated, Identity
from feed.services._shared.policies.common import is_owner
from feed.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (caller identity, request ids).

    :param identity: Identity resolved by the authorization gate.
    :param request_id: Correlation id for logging/tracing.
    """

    identity: Identity = field(default=ANONYMOUS)
    request_id: str | None = None

    @property
    def actor_id(self) -> int | None:
        """Authenticated user id, or ``None`` for anonymous callers."""
        if isinstance(self.identity, Authenticated):
            return self.identity.user_id
        return None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize authentication and ownership checks.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Domain rules (normalization, owned-set bookkeeping) live in the models.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (identity, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # --------------------------- AuthN / AuthZ ------------------------------

    def require_authenticated(self) -> int:
        """
        Return the caller's user id, rejecting anonymous callers.

        :returns: Authenticated user id.
        :rtype: int
        :raises UnauthenticatedError: If the caller is anonymous.
        """
        actor_id = self.ctx.actor_id
        if actor_id is None:
            raise UnauthenticatedError()
        return actor_id

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor is the resource owner.

        Ownership is always derived from the resource's own owner column, never
        from any denormalized bookkeeping on the actor.

        :param actor_id: Authenticated user id.
        :param owner_id: Owner user id recorded on the resource.
        :type owner_id: int
        :param msg: Optional custom error message.
        :type msg: str | None
        :raises AuthorizationError: If actor is not the owner.
        """
        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "Not authorized!")
