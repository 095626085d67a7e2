"""JSON logging to stdout, correlated per request through ``X-Request-ID``."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Structured ``extra`` fields copied onto the JSON line
EXTRA_KEYS = ("endpoint", "elapsed_ms", "post_id", "user_id", "image_url", "action")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with whitelisted ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        line.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def _inbound_request_id() -> str | None:
    for header in INBOUND_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return None


def ensure_request_id() -> str:
    """Return the id correlating the current request.

    Inside a request the id is taken from the inbound headers or generated,
    then cached on ``g``. Outside a request a fresh id is returned each call.
    """
    if not has_request_context():
        return str(uuid4())
    if "request_id" not in g:
        g.request_id = _inbound_request_id() or str(uuid4())
    return g.request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Route all logging through a single JSON handler on stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Assign a request id to every request and echo it on the response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _assign_request_id() -> None:
        # g outlives a request when an app context was already pushed
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
