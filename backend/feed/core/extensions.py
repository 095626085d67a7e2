"""Flask extension singletons and their binding to an application."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_EXTENSION_KEY = "redis_client"

# Constraint names must be stable so services can match IntegrityErrors on them
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def _connect_redis(url: str) -> redis.Redis:
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis at {url!r} is unreachable") from exc
    return client


def init_app(app: Flask) -> None:
    """Bind the database, migrations, JWT and the login rate limiter to ``app``.

    When ``REDIS_URL`` is set a connected client is stored under
    ``app.extensions["redis_client"]`` for the notification channel;
    otherwise no client is registered and the in-process channel is used.
    """
    db.init_app(app)

    # Model classes must be registered on the metadata before Alembic runs
    from feed import models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        app.extensions[REDIS_EXTENSION_KEY] = _connect_redis(redis_url)
    else:
        app.extensions.pop(REDIS_EXTENSION_KEY, None)
