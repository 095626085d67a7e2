"""Caller status endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from feed.api.deps import identity_service, json_response, timing
from feed.schemas import StatusSchema
from feed.services import StatusUpdateIn

bp = Blueprint("users", __name__)

status_schema = StatusSchema()


@bp.get("/me/status")
@timing
def get_status():
    """Return the caller's status line."""
    result = identity_service().get_status()
    return json_response({"data": status_schema.dump(result)})


@bp.route("/me/status", methods=["PATCH", "PUT"])
@timing
def update_status():
    """Replace the caller's status line."""
    data = status_schema.load(request.get_json(silent=True) or {})
    result = identity_service().update_status(StatusUpdateIn(status=data["status"]))
    return json_response({"data": status_schema.dump(result)})
