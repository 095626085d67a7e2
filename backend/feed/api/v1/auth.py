"""Registration and login endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from feed.api.deps import identity_service, json_response, timing
from feed.core.extensions import limiter
from feed.schemas import LoginSchema, RegisterSchema, TokenResponseSchema, UserSchema
from feed.services import UserAuthIn, UserRegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
user_schema = UserSchema()
token_schema = TokenResponseSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.route("/register", methods=["POST", "PUT"])
@timing
def register():
    """Register a new user and return its public representation."""
    payload = register_schema.load(request.get_json(silent=True) or {})
    user = identity_service().register(UserRegisterIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an identity token."""
    data = login_schema.load(request.get_json(silent=True) or {})
    result = identity_service().authenticate(UserAuthIn(**data))
    return json_response({"data": token_schema.dump(result)})
