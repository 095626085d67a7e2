# feed/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from feed.services._shared.ports import TokenProvider, TokenVerificationError


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    def sign(
        self,
        *,
        identity: int | str,
        claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        # PyJWT requires the "sub" claim to be a string
        return cast(
            str,
            _create_access(
                identity=str(identity),
                additional_claims=dict(claims or {}),
                expires_delta=expires_delta,
            ),
        )

    def verify(self, token: str) -> dict[str, Any]:
        from flask_jwt_extended import decode_token

        try:
            decoded = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            raise TokenVerificationError(str(exc) or exc.__class__.__name__) from exc
        if decoded.get("type") != "access":
            raise TokenVerificationError("Wrong token type: access token required.")
        return decoded
