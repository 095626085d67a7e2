"""User repository for persistence and credential checks."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from feed.models.user import User
from feed.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lookups, credential verification and status/owned-set persistence. Token
    issuance is not handled here.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {"email": User.email}

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not including password)."""
        return {"name", "status"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == email.lower().strip())
        return self.session.execute(stmt).first() is not None

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when ``email``/``password`` match, else ``None``."""
        user = self.get_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user

    # ---------------------------- Owned-set ----------------------------

    def add_post_ref(self, user: User, post_id: int) -> None:
        """Append ``post_id`` to ``user``'s owned-set and flush."""
        user.add_post_ref(post_id)
        self.flush()

    def remove_post_ref(self, user: User, post_id: int) -> bool:
        """Remove ``post_id`` from ``user``'s owned-set and flush."""
        removed = user.remove_post_ref(post_id)
        self.flush()
        return removed
