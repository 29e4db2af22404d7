"""Flask application factory and initialization."""

import logging
from typing import Type

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from config.base import BaseConfig

# Initialize extensions
db = SQLAlchemy()
cors = CORS()
limiter = Limiter(key_func=get_remote_address)


def setup_logging(app: Flask, log_format: str = "json") -> None:
    """Setup logging configuration for the application."""
    log_level = app.config.get("LOG_LEVEL", "INFO")

    if log_format == "json":
        # Structured JSON logging
        from pythonjsonlogger import jsonlogger

        handler = logging.StreamHandler()
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        # Service modules log through their own module loggers
        logging.getLogger("intake").addHandler(handler)

    app.logger.setLevel(getattr(logging, log_level))
    logging.getLogger("intake").setLevel(getattr(logging, log_level))

    app.logger.info(
        "Application initialized",
        extra={
            "environment": app.config.get("ENV", "development"),
            "debug": app.debug,
            "testing": app.testing,
        }
    )


def setup_error_handlers(app: Flask) -> None:
    """Register error handlers."""

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return {
            "error": "Not Found",
            "message": "The requested resource was not found",
            "status": 404,
        }, 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        app.logger.error(f"Internal server error: {error}")
        return {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status": 500,
        }, 500

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors."""
        return {
            "error": "Method Not Allowed",
            "message": "The HTTP method is not allowed for this resource",
            "status": 405,
        }, 405

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 errors."""
        return {
            "error": "Bad Request",
            "message": "The request was invalid",
            "status": 400,
        }, 400

    @app.errorhandler(429)
    def rate_limited(error):
        """Handle rate limit errors."""
        return {
            "error": "Too Many Requests",
            "message": "Rate limit exceeded, please retry later",
            "status": 429,
        }, 429


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    from intake.routes import api
    from intake.routes import auth_routes
    from intake.routes import primary_invitation_routes
    from intake.routes import tracker_routes

    # Health check, service info
    app.register_blueprint(api.bp)

    # Admin authentication
    app.register_blueprint(auth_routes.bp)

    # Primary invitations (admin + public token routes)
    app.register_blueprint(primary_invitation_routes.bp)

    # Work tracker reminders
    app.register_blueprint(tracker_routes.bp)


def setup_scheduler(app: Flask) -> None:
    """Start the tracker reminder scheduler and arm it from stored settings."""
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("Tracker scheduler disabled")
        return

    from sqlalchemy.exc import SQLAlchemyError

    from intake.services.tracker_scheduler import TrackerScheduler
    from intake.services.tracker_service import TrackerService

    scheduler = TrackerScheduler(app)
    app.extensions["tracker_scheduler"] = scheduler
    scheduler.start()

    with app.app_context():
        try:
            schedule = TrackerService.get_settings().to_schedule()
        except SQLAlchemyError as e:
            # Tables may not exist before the first migration
            db.session.rollback()
            app.logger.warning(f"Tracker scheduler not armed: {e}")
            return
    scheduler.reschedule(schedule)


def create_app(config: Type[BaseConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Configuration class to use. If None, uses environment-based config.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    if config is None:
        from config.settings import settings

        if settings.is_production:
            from config.production import ProductionConfig
            config = ProductionConfig
        elif settings.is_testing:
            from config.testing import TestingConfig
            config = TestingConfig
        else:
            from config.development import DevelopmentConfig
            config = DevelopmentConfig

    app.config.from_object(config)

    # Setup logging
    setup_logging(app, app.config.get("LOG_FORMAT", "json"))

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)

    cors.init_app(app, resources={
        r"/*": {
            "origins": app.config.get("CORS_ORIGINS", ["*"]),
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": app.config.get("CORS_ALLOW_HEADERS", ["*"]),
            "expose_headers": app.config.get("CORS_EXPOSE_HEADERS", ["*"]),
            "supports_credentials": app.config.get("CORS_SUPPORTS_CREDENTIALS", True),
        }
    })

    setup_error_handlers(app)
    register_blueprints(app)

    # Note: Database tables are managed via Alembic migrations (python manage.py migrate)
    setup_scheduler(app)

    app.logger.info(
        "Flask application created",
        extra={
            "config": config.__name__,
            "database": app.config.get("SQLALCHEMY_DATABASE_URI", "").split("://")[0],
        }
    )

    return app