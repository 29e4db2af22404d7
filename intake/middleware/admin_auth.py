"""Admin authentication middleware."""

from functools import wraps

from flask import request, jsonify

from intake.services.admin_auth_service import AdminAuthService


def error_response(message: str, status: int = 401):
    """Helper to create error responses."""
    return jsonify({
        "error": "Unauthorized",
        "message": message,
        "status": status,
    }), status


def require_admin(f):
    """
    Decorator to require admin authentication.

    Validates the Bearer JWT and attaches its payload as ``request.admin``.

    Usage:
        @bp.route("/admin-only")
        @require_admin
        def admin_endpoint():
            return {"admin_id": request.admin["user_id"]}
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        # Skip authentication for OPTIONS requests (CORS preflight)
        if request.method == "OPTIONS":
            return f(*args, **kwargs)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return error_response("Authorization header is required")

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return error_response("Invalid Authorization header format. Use: Bearer <token>")

        try:
            request.admin = AdminAuthService.validate_token(parts[1])
        except ValueError as e:
            return error_response(str(e))

        return f(*args, **kwargs)

    return decorated_function
