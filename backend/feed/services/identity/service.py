"""
IdentityService
===============

Aggregate service responsible for the ``User`` aggregate:

- Registration (email uniqueness, password hashing via the model)
- Authentication and identity token issuance
- Reading and replacing the caller's status line
"""

from __future__ import annotations

import logging
from datetime import timedelta

from marshmallow import ValidationError, validate
from sqlalchemy.exc import IntegrityError

from feed.repositories.user import UserRepository
from feed.services._shared.base import BaseService, ServiceContext
from feed.services._shared.errors import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ViolationCollector,
    violates,
)
from feed.services._shared.ports.token_provider import TokenProvider
from feed.services.identity.dto import (
    AuthTokenOut,
    StatusOut,
    StatusUpdateIn,
    UserAuthIn,
    UserPublicOut,
    UserRegisterIn,
)

logger = logging.getLogger(__name__)

INVALID_EMAIL_MESSAGE = "Please enter a valid email."
MIN_PASSWORD_LENGTH = 5
TOKEN_TTL = timedelta(hours=1)
USER_EXISTS_MESSAGE = "User already exists!"


class IdentityService(BaseService):
    """
    Application service for the ``User`` aggregate.

    :param ctx: Request-scoped context carrying the caller identity.
    :param token_provider: Token service used by :meth:`authenticate`.
    :param token_ttl: Lifetime of issued identity tokens.
    """

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        token_provider: TokenProvider | None = None,
        token_ttl: timedelta = TOKEN_TTL,
    ) -> None:
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.token_ttl = token_ttl

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Register a new user.

        :param dto: User registration input DTO.
        :type dto: UserRegisterIn
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises ValidationFailedError: When any field is invalid (all listed).
        :raises ConflictError: When the email is already registered.
        """
        errors = ViolationCollector()
        if not _is_email(dto.email):
            errors.add("email", INVALID_EMAIL_MESSAGE)
        errors.min_length("password", dto.password, MIN_PASSWORD_LENGTH)
        errors.not_blank("name", dto.name)
        errors.raise_if_any()

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "email already in use", message=USER_EXISTS_MESSAGE)

            try:
                user = repo.model(
                    email=dto.email,
                    password=dto.password,  # model hashes via setter
                    name=dto.name,
                )
                repo.add(user)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise ConflictError(
                        "User", "email already in use", message=USER_EXISTS_MESSAGE
                    ) from exc
                raise

            out = _public(user)

        logger.info("User registered", extra={"user_id": out.id})
        return out

    # --------------------------------------------------------------------- #
    # Authentication
    # --------------------------------------------------------------------- #

    def authenticate(self, dto: UserAuthIn) -> AuthTokenOut:
        """
        Verify credentials and issue an identity token.

        :param dto: Authentication input DTO.
        :type dto: UserAuthIn
        :returns: Signed token and the user id.
        :rtype: AuthTokenOut
        :raises UnauthenticatedError: Unknown email or wrong password.
        """
        if self.tokens is None:
            raise RuntimeError("IdentityService.authenticate requires a token provider.")

        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(dto.email or "")
            if user is None:
                raise UnauthenticatedError("A user with this email could not be found.")
            if not user.verify_password(dto.password or ""):
                raise UnauthenticatedError("Passwords do not match")
            user_id, email = user.id, user.email

        token = self.tokens.sign(
            identity=user_id,
            claims={"email": email, "user_id": user_id},
            expires_delta=self.token_ttl,
        )
        logger.info("User authenticated", extra={"user_id": user_id})
        return AuthTokenOut(token=token, user_id=user_id)

    # --------------------------------------------------------------------- #
    # Status
    # --------------------------------------------------------------------- #

    def get_status(self) -> StatusOut:
        """Return the caller's status line."""
        user_id = self.require_authenticated()
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return StatusOut(status=user.status)

    def update_status(self, dto: StatusUpdateIn) -> StatusOut:
        """
        Replace the caller's status line.

        :raises UnauthenticatedError: Anonymous caller.
        :raises ValidationFailedError: Blank status.
        :raises NotFoundError: The caller's user record no longer exists.
        """
        user_id = self.require_authenticated()

        errors = ViolationCollector()
        errors.not_blank("status", dto.status)
        errors.raise_if_any()

        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.update(user, status=dto.status.strip())
            out = StatusOut(status=user.status)

        logger.info("Status updated", extra={"user_id": user_id})
        return out


def _public(user) -> UserPublicOut:
    return UserPublicOut(id=user.id, email=user.email, name=user.name, status=user.status)


_email_validator = validate.Email()


def _is_email(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        _email_validator(value.strip())
    except ValidationError:
        return False
    return True
