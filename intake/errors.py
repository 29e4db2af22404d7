"""Typed errors raised by the intake services.

Each error carries the HTTP status the route layer answers with, so the
routes never inspect message text to decide a response.
"""

from typing import Optional

INVALID_LINK_MESSAGE = "Invalid or expired invitation link"
TRACKER_LINK_MESSAGE = "The tracker link is invalid or has expired."


class IntakeError(Exception):
    """Base class for domain errors."""

    status_code = 400
    code = "intake_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        data = {
            "error": self.code,
            "message": self.message,
            "status": self.status_code,
        }
        if self.details:
            data["details"] = self.details
        return data


class NotFound(IntakeError):
    status_code = 404
    code = "not_found"

    def __init__(self, message: str = INVALID_LINK_MESSAGE, details: Optional[dict] = None):
        super().__init__(message, details)


class Expired(IntakeError):
    # Same message as NotFound so a token's existence is never revealed
    status_code = 410
    code = "expired"

    def __init__(self, message: str = INVALID_LINK_MESSAGE, details: Optional[dict] = None):
        super().__init__(message, details)


class AlreadyCompleted(IntakeError):
    status_code = 400
    code = "already_completed"

    def __init__(self, message: str = "This invitation has already been submitted", details: Optional[dict] = None):
        super().__init__(message, details)


class ValidationFailed(IntakeError):
    """Submission is incomplete; ``field`` is the path of the first gap."""

    status_code = 400
    code = "validation_failed"

    def __init__(self, message: str, field: str):
        super().__init__(message, {"field": field})
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["field"] = self.field
        return data


class UnsupportedUploadField(IntakeError):
    status_code = 400
    code = "unsupported_upload_field"


class FieldLocked(IntakeError):
    status_code = 409
    code = "field_locked"


class UploadFailed(IntakeError):
    status_code = 502
    code = "upload_failed"


class DispatchFailed(IntakeError):
    status_code = 502
    code = "dispatch_failed"
