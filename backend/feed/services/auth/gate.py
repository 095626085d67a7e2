"""Authorization gate: turn a raw credential into a caller :data:`Identity`.

The gate never rejects a request. A missing, malformed, badly signed or
expired credential yields :data:`ANONYMOUS`; operations decide for themselves
whether anonymous callers are acceptable.
"""

from __future__ import annotations

import logging

from feed.services._shared.identity import ANONYMOUS, Authenticated, Identity
from feed.services._shared.ports.token_provider import (
    TokenProvider,
    TokenVerificationError,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def _strip_scheme(credential: str) -> str:
    """Remove a leading ``Bearer`` scheme (case-insensitive) if present."""
    raw = credential.strip()
    if raw.lower().startswith(BEARER_PREFIX):
        return raw[len(BEARER_PREFIX) :].strip()
    return raw


def resolve_identity(credential: str | None, tokens: TokenProvider) -> Identity:
    """
    Resolve the caller identity from an ``Authorization`` header value.

    :param credential: Raw header value, e.g. ``"Bearer <token>"``, or ``None``.
    :type credential: str | None
    :param tokens: Token service used to verify signature and expiry.
    :type tokens: TokenProvider
    :returns: :class:`Authenticated` on a valid token, otherwise ``ANONYMOUS``.
    :rtype: Identity
    """
    if not credential or not credential.strip():
        return ANONYMOUS

    token = _strip_scheme(credential)
    if not token:
        return ANONYMOUS

    try:
        claims = tokens.verify(token)
    except TokenVerificationError as exc:
        logger.debug("Credential rejected: %s", exc)
        return ANONYMOUS

    subject = claims.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        logger.debug("Credential rejected: non-integer subject %r", subject)
        return ANONYMOUS

    return Authenticated(user_id=user_id)
