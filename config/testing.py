"""Testing environment configuration."""

from .base import BaseConfig


class TestingConfig(BaseConfig):
    """Testing environment configuration."""

    DEBUG = True
    TESTING = True

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    # SQLite's singleton pool rejects pool_size/pool_recycle
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}

    # Session
    SESSION_COOKIE_SECURE = False

    # CORS - Allow all for testing
    CORS_ORIGINS = ["*"]

    # Logging
    LOG_LEVEL = "DEBUG"
    LOG_FORMAT = "text"

    RATELIMIT_ENABLED = False
    SCHEDULER_ENABLED = False

    # Allowed Hosts
    ALLOWED_HOSTS = ["*"]
