"""Environment-selected configuration classes.

``APP_ENV`` picks the class (``development``, ``testing`` or ``production``);
individual values come from environment variables, optionally loaded from a
``.env`` file.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"

TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag such as ``RATELIMIT_ENABLED=yes``; unset gives ``default``."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in TRUTHY


def env_int(name: str, default: int) -> int:
    """Read an integer; unset, blank or malformed values give ``default``."""
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw.lstrip("-").isdigit() else default


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Lifetime of identity tokens issued at login (one hour).
    REDIS_URL: str | None
        Broker for post lifecycle events. Unset keeps events in-process.
    NOTIFICATION_CHANNEL: str
        Pub/sub channel the events are published on.
    UPLOAD_FOLDER: str
        Directory receiving uploaded post images.
    IMAGE_URL_PREFIX: str
        Leading path segment of the image references given to clients.
    POSTS_PER_PAGE: int
        Fixed page size of the feed.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression guarding the login endpoint.
    """

    APP_ENV = os.getenv(ENV_VAR, "development")
    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_TOKEN_LOCATION = ["headers"]

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO")

    REDIS_URL = os.getenv("REDIS_URL") or None
    NOTIFICATION_CHANNEL = os.getenv("NOTIFICATION_CHANNEL", "posts")

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.abspath("./images"))
    IMAGE_URL_PREFIX = os.getenv("IMAGE_URL_PREFIX", "images")
    MAX_CONTENT_LENGTH = env_int("MAX_CONTENT_LENGTH", 8 * 1024 * 1024)

    POSTS_PER_PAGE = 10

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on unless ``FLASK_DEBUG`` says otherwise."""

    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Test runs: in-memory SQLite, in-process events, no rate limiting."""

    APP_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    JWT_SECRET_KEY = "testing-secret-key-with-enough-length-for-hs256"


class ProductionConfig(BaseConfig):
    APP_ENV = "production"
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the class named by ``APP_ENV``, defaulting to development."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
