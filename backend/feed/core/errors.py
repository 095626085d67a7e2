"""Render every error raised while handling a request as RFC 7807 JSON."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from feed.core.logger import ensure_request_id
from feed.services._shared.errors import ErrorKind, ServiceError

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Service error kind -> (HTTP status, stable code)
SERVICE_ERROR_STATUS: dict[ErrorKind, tuple[HTTPStatus, str]] = {
    ErrorKind.UNAUTHENTICATED: (HTTPStatus.UNAUTHORIZED, "unauthorized"),
    ErrorKind.FORBIDDEN: (HTTPStatus.FORBIDDEN, "forbidden"),
    ErrorKind.VALIDATION_FAILED: (HTTPStatus.UNPROCESSABLE_ENTITY, "validation_error"),
    ErrorKind.NOT_FOUND: (HTTPStatus.NOT_FOUND, "not_found"),
    ErrorKind.CONFLICT: (HTTPStatus.CONFLICT, "conflict"),
    ErrorKind.INTERNAL: (HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"),
}

HTTP_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}

UNEXPECTED = "Unexpected error"


def problem(
    status: int,
    code: str,
    detail: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a problem document for the current request.

    :param status: HTTP status code.
    :param code: Stable machine-readable error code.
    :param detail: Client-safe explanation.
    :param details: Optional structured payload (e.g. ``violations``).
    :returns: Problem body including the correlating ``request_id``.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": detail,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        body["details"] = details
    body["request_id"] = ensure_request_id()
    return body


def _respond(body: dict[str, Any], *, exc_info: bool = False) -> tuple[Response, int]:
    status = body["status"]
    if status >= 500:
        log.error("%s: %s request_id=%s", body["code"], body["detail"], body["request_id"], exc_info=exc_info)
    else:
        log.warning("%s: %s request_id=%s", body["code"], body["detail"], body["request_id"])
    response = jsonify(body)
    response.mimetype = PROBLEM_MIMETYPE
    return response, status


def service_error_problem(err: ServiceError) -> dict[str, Any]:
    """Problem body for a tagged service error; internal failures stay opaque."""
    status, code = SERVICE_ERROR_STATUS[err.kind]
    detail = UNEXPECTED if err.kind is ErrorKind.INTERNAL else str(err)
    return problem(status, code, detail, err.payload() or None)


def init_app(app: Flask) -> None:
    """Register the problem+json handlers on ``app``."""

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return _respond(service_error_problem(err), exc_info=True)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or HTTPStatus.INTERNAL_SERVER_ERROR
        code = HTTP_STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        return _respond(problem(status, code, detail))

    @app.errorhandler(MarshmallowValidationError)
    def handle_shape_error(err: MarshmallowValidationError):
        body = problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.messages},
        )
        return _respond(body)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # The raw database message stays in the log only
        log.error("IntegrityError", exc_info=err)
        return _respond(problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict"))

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        body = problem(HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable", "Service temporarily unavailable")
        return _respond(body, exc_info=True)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return _respond(problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", UNEXPECTED), exc_info=True)
