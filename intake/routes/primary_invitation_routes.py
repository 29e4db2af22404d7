"""
Primary Invitation Routes
Authenticated routes for admins and public token routes for clients
"""
import json

from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError

from intake import db, limiter
from intake.errors import IntakeError
from intake.middleware.admin_auth import require_admin
from intake.services.primary_invitation_service import PrimaryInvitationService
from intake.schemas.primary_invitation_schema import (
    SendInvitationSchema,
    SendBulkSchema,
    ResendInvitationSchema,
    InvitationFormSchema,
    UploadDocumentSchema,
    ListInvitationsQuerySchema,
    CompletedQuerySchema,
    AdminEditSchema,
)

bp = Blueprint("primary_invitations", __name__, url_prefix="/api/primary-invitations")


def error_response(message: str, status: int = 400, details=None):
    """Create a standardized error response."""
    return jsonify({
        "error": "Error",
        "message": message,
        "status": status,
        "details": details,
    }), status


def intake_error_response(error: IntakeError):
    db.session.rollback()
    return jsonify(error.to_dict()), error.status_code


def validation_details(error: ValidationError):
    return json.loads(error.json(include_url=False))


def _admin_name(requested):
    return requested or request.admin.get("name")


# ============================================================================
# AUTHENTICATED ROUTES (Admin)
# ============================================================================

@bp.route("/send", methods=["POST"])
@require_admin
def send_invitation():
    """
    Send one primary invitation.

    POST /api/primary-invitations/send
    Body: {email, adminName?}
    """
    try:
        data = SendInvitationSchema.model_validate(request.get_json(silent=True) or {})
        invitation = PrimaryInvitationService.create_invitation(
            email=data.email,
            admin_name=_admin_name(data.adminName),
        )
        return jsonify({
            "message": "Invitation sent",
            "invitation": invitation.to_dict(include_sensitive=True),
            "invitationLink": PrimaryInvitationService.build_invitation_link(invitation.token),
        }), 201

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except IntakeError as e:
        return intake_error_response(e)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error sending primary invitation: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/send-bulk", methods=["POST"])
@require_admin
def send_bulk():
    """
    Send invitations to several emails.

    POST /api/primary-invitations/send-bulk
    Body: {emails: [...], adminName?}
    """
    try:
        data = SendBulkSchema.model_validate(request.get_json(silent=True) or {})
        results = PrimaryInvitationService.send_bulk(data.emails, _admin_name(data.adminName))
        return jsonify(results), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error sending bulk invitations: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/resend", methods=["POST"])
@require_admin
def resend_invitation():
    """
    Re-issue the latest invitation for an email with a new token.

    POST /api/primary-invitations/resend
    Body: {email, adminName?}
    """
    try:
        data = ResendInvitationSchema.model_validate(request.get_json(silent=True) or {})
        invitation = PrimaryInvitationService.resend_invitation(
            email=data.email,
            admin_name=_admin_name(data.adminName),
        )
        return jsonify({
            "message": "Invitation resent",
            "invitation": invitation.to_dict(include_sensitive=True),
            "invitationLink": PrimaryInvitationService.build_invitation_link(invitation.token),
        }), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except IntakeError as e:
        return intake_error_response(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error resending primary invitation: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("", methods=["GET"])
@require_admin
def list_invitations():
    """
    GET /api/primary-invitations?status=draft&limit=50
    """
    try:
        query = ListInvitationsQuerySchema.model_validate(request.args.to_dict())
        invitations = PrimaryInvitationService.list_invitations(status=query.status, limit=query.limit)
        return jsonify({
            "invitations": [invitation.to_dict() for invitation in invitations],
            "count": len(invitations),
        }), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except Exception as e:
        current_app.logger.error(f"Error listing primary invitations: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/completed", methods=["GET"])
@require_admin
def list_completed():
    """
    GET /api/primary-invitations/completed?page=1&limit=20&search=acme
    """
    try:
        query = CompletedQuerySchema.model_validate(request.args.to_dict())
        results = PrimaryInvitationService.list_completed(
            page=query.page,
            limit=query.limit,
            search=query.search,
        )
        return jsonify(results), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except Exception as e:
        current_app.logger.error(f"Error listing completed invitations: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/completed/<int:invitation_id>", methods=["GET"])
@require_admin
def get_completed(invitation_id: int):
    try:
        invitation = PrimaryInvitationService.get_completed(invitation_id)
        return jsonify({"invitation": invitation.to_dict()}), 200
    except IntakeError as e:
        return intake_error_response(e)
    except Exception as e:
        current_app.logger.error(f"Error getting completed invitation {invitation_id}: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/<int:invitation_id>/history", methods=["GET"])
@require_admin
def get_history(invitation_id: int):
    try:
        history = PrimaryInvitationService.get_history(invitation_id)
        return jsonify({"history": history, "count": len(history)}), 200
    except IntakeError as e:
        return intake_error_response(e)
    except Exception as e:
        current_app.logger.error(f"Error getting history for invitation {invitation_id}: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/<int:invitation_id>", methods=["PUT"])
@require_admin
def edit_invitation(invitation_id: int):
    """
    Apply admin edits to a submission.

    PUT /api/primary-invitations/<id>
    Body: {changes: [{field: "companyInfo.gstNumber", value: "..."}, ...]}
    """
    try:
        data = AdminEditSchema.model_validate(request.get_json(silent=True) or {})
        invitation = PrimaryInvitationService.apply_admin_edit(
            invitation_id,
            data.changes,
            admin_name=request.admin.get("name"),
        )
        return jsonify({"message": "Invitation updated", "invitation": invitation.to_dict()}), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except IntakeError as e:
        return intake_error_response(e)
    except ValueError as e:
        db.session.rollback()
        return error_response(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error editing invitation {invitation_id}: {e}", exc_info=True)
        return error_response("Internal server error", 500)


# ============================================================================
# PUBLIC ROUTES (token holder)
# ============================================================================

@bp.route("/token/<token>", methods=["GET"])
@limiter.limit("60 per minute")
def get_by_token(token: str):
    """
    Load the form for a token.

    GET /api/primary-invitations/token/<token>
    """
    try:
        return jsonify({"invitation": PrimaryInvitationService.get_client_view(token)}), 200
    except IntakeError as e:
        return intake_error_response(e)
    except Exception as e:
        current_app.logger.error(f"Error loading invitation by token: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/token/<token>/save-draft", methods=["POST"])
@limiter.limit("30 per minute")
def save_draft(token: str):
    """
    POST /api/primary-invitations/token/<token>/save-draft
    Body: {companyInfo?, applicantInfo?, inventors?, comments?}
    """
    try:
        form = InvitationFormSchema.model_validate(request.get_json(silent=True) or {})
        invitation = PrimaryInvitationService.save_draft(token, form.to_payload())
        return jsonify({"message": "Draft saved", "invitation": invitation.to_client_dict()}), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except IntakeError as e:
        return intake_error_response(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving draft: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/token/<token>/submit", methods=["POST"])
@limiter.limit("10 per minute")
def submit(token: str):
    """
    POST /api/primary-invitations/token/<token>/submit
    Body: {companyInfo?, applicantInfo?, inventors?, comments?}
    """
    try:
        form = InvitationFormSchema.model_validate(request.get_json(silent=True) or {})
        invitation = PrimaryInvitationService.submit(token, form.to_payload())
        return jsonify({"message": "Form submitted", "invitation": invitation.to_client_dict()}), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except IntakeError as e:
        return intake_error_response(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error submitting form: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/token/<token>/upload", methods=["POST"])
@limiter.limit("20 per minute")
def upload_document(token: str):
    """
    Upload a company document.

    POST /api/primary-invitations/token/<token>/upload
    Body: {fieldName: "gstCertificate"|"entityCertificate", file: {data, name, type}}
    """
    try:
        data = UploadDocumentSchema.model_validate(request.get_json(silent=True) or {})
        descriptor = PrimaryInvitationService.upload_document(
            token,
            field_name=data.fieldName,
            file_data=data.file.data,
            filename=data.file.name,
            content_type=data.file.type,
        )
        return jsonify({
            "message": "Document uploaded",
            "fieldName": data.fieldName,
            "document": descriptor,
        }), 200

    except ValidationError as e:
        return error_response("Validation error", 400, validation_details(e))
    except IntakeError as e:
        return intake_error_response(e)
    except ValueError as e:
        db.session.rollback()
        return error_response(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error uploading document: {e}", exc_info=True)
        return error_response("Internal server error", 500)
