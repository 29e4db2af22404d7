"""Admin authentication routes."""

import json

from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError

from intake import db, limiter
from intake.middleware.admin_auth import require_admin
from intake.models import AdminUser
from intake.schemas.auth_schema import AdminLoginSchema
from intake.services.admin_auth_service import AdminAuthService

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def error_response(message: str, status: int = 400, details=None):
    """Create a standardized error response."""
    return jsonify({
        "error": "Error",
        "message": message,
        "status": status,
        "details": details,
    }), status


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    """
    POST /api/auth/login
    Body: {email, password}
    """
    try:
        data = AdminLoginSchema.model_validate(request.get_json(silent=True) or {})
        return jsonify(AdminAuthService.login(data.email, data.password)), 200

    except ValidationError as e:
        return error_response("Validation error", 400, json.loads(e.json(include_url=False)))
    except ValueError as e:
        return error_response(str(e), 401)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error during admin login: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/me", methods=["GET"])
@require_admin
def me():
    """Current admin profile."""
    admin = db.session.get(AdminUser, request.admin["user_id"])
    return jsonify({"admin": admin.to_dict()}), 200
