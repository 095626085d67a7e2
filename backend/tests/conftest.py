"""Pytest fixtures: a fresh application and empty schema for every test.

Each test gets its own app built from :class:`TestingConfig` (in-memory
SQLite, in-process notification channel, rate limiting off) with uploads
written under ``tmp_path``.
"""

from __future__ import annotations

import os

import pytest

from feed.core.config import TestingConfig
from feed.core.extensions import db as _db
from feed.factory import create_app
from feed.infra.jwt.flask_jwt_token_provider import JWTTokenProvider


@pytest.fixture()
def app(tmp_path):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application whose image store writes under ``tmp_path / "images"``.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)

    class _Config(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / "images")

    app = create_app(_Config, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture()
def db(app):
    """Create all tables inside an application context and drop them afterwards.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(db):
    """Return the Flask-scoped session shared with the code under test."""
    return db.session


@pytest.fixture()
def client(app, db):
    """Flask test client; requests reuse the fixture's application context."""
    return app.test_client()


@pytest.fixture()
def channel(app):
    """The in-process notification channel registered on ``app``."""
    return app.extensions["notification_channel"]


@pytest.fixture()
def image_store(app):
    """The local image store registered on ``app``."""
    return app.extensions["image_store"]


@pytest.fixture()
def auth_headers(db):
    """Return a callable building ``Authorization`` headers for a user."""

    def _make(user) -> dict[str, str]:
        token = JWTTokenProvider().sign(
            identity=user.id,
            claims={"email": user.email, "user_id": user.id},
        )
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the Flask-scoped session ----------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when the test uses the database."""
    from tests.factories import SQLAlchemySession

    if "db" in request.fixturenames or "session" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    else:
        SQLAlchemySession.set(None)
    yield
    SQLAlchemySession.set(None)
