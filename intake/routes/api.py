"""API routes for the application."""

from datetime import datetime

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from intake import db
from intake.schemas import HealthCheckSchema, AppInfoSchema

bp = Blueprint("api", __name__, url_prefix="/api")

APP_NAME = "Patent Intake Server"
APP_VERSION = "0.1.0"


@bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    try:
        db.session.execute(text("SELECT 1"))
        database = "connected"
        status = "healthy"
    except SQLAlchemyError as e:
        current_app.logger.error(f"Health check database error: {e}")
        db.session.rollback()
        database = "unavailable"
        status = "degraded"

    schema = HealthCheckSchema(
        status=status,
        timestamp=datetime.utcnow(),
        environment=current_app.config.get("ENV", "development"),
        database=database,
    )
    return jsonify(schema.model_dump(mode="json")), 200 if status == "healthy" else 503


@bp.route("/info", methods=["GET"])
def app_info():
    """Get application information."""
    schema = AppInfoSchema(
        name=APP_NAME,
        version=APP_VERSION,
        environment=current_app.config.get("ENV", "development"),
        debug=current_app.debug,
        timestamp=datetime.utcnow(),
    )
    return jsonify(schema.model_dump(mode="json")), 200


@bp.route("/", methods=["GET"])
def root():
    """Root API endpoint."""
    return jsonify({
        "message": "Welcome to the Patent Intake API",
        "version": APP_VERSION,
        "endpoints": {
            "health": "/api/health",
            "info": "/api/info",
            "primary_invitations": "/api/primary-invitations",
            "tracker": "/api/tracker",
        },
    }), 200
