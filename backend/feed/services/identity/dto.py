"""Inputs and outputs of :class:`~feed.services.identity.service.IdentityService`."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Registration request.

    :param email: Login email; stored lowercased and trimmed.
    :param password: Plain password, hashed by the model setter.
    :param name: Display name shown next to the user's posts.
    """

    email: str
    password: str
    name: str


@dataclass(frozen=True, slots=True)
class UserAuthIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class StatusUpdateIn:
    """Replacement status line; blank values are rejected."""

    status: str


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """User as exposed to clients. The password hash never leaves the model."""

    id: int
    email: str
    name: str
    status: str


@dataclass(frozen=True, slots=True)
class AuthTokenOut:
    """Signed identity token plus the id it was issued for."""

    token: str
    user_id: int


@dataclass(frozen=True, slots=True)
class StatusOut:
    status: str
