from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class TokenVerificationError(Exception):
    """Raised when a token is malformed, badly signed or expired."""


class TokenProvider(Protocol):
    """Port for issuing and verifying signed identity tokens."""

    def sign(
        self,
        *,
        identity: int | str,
        claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def verify(self, token: str) -> dict[str, Any]:
        """Return the decoded claims or raise :class:`TokenVerificationError`."""
        ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime.now(tz=UTC)
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def advance(self, delta: timedelta) -> None:
        """Move the provider clock forward (to exercise expiry)."""
        self._now += delta

    def sign(
        self,
        *,
        identity: int | str,
        claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        self._seq += 1
        token = f"stub.{identity}.{self._seq}"
        payload: dict[str, Any] = {
            "sub": str(identity),
            "iat": int(self._now.timestamp()),
            "exp": int((self._now + (expires_delta or timedelta(hours=1))).timestamp()),
        }
        if claims:
            payload.update(claims)
        self._issued[token] = payload
        return token

    def verify(self, token: str) -> dict[str, Any]:
        payload = self._issued.get(token)
        if payload is None:
            raise TokenVerificationError("Unknown token")
        if payload["exp"] <= int(self._now.timestamp()):
            raise TokenVerificationError("Token expired")
        return dict(payload)
