"""
Primary invitation lifecycle rules.

Functions here never touch the session. They read an invitation (or any
object with the same attributes), decide whether a transition is allowed,
and return a ``LifecyclePatch`` describing the column changes and the
history entry to append. ``PrimaryInvitationService`` applies patches and
commits.
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from intake.errors import (
    AlreadyCompleted,
    Expired,
    FieldLocked,
    UnsupportedUploadField,
    ValidationFailed,
)
from intake.models.primary_invitation import (
    COMPANY_INFO,
    DOCUMENT_FIELDS,
    InvitationStatus,
)

# Client payload key -> column name
PAYLOAD_COLUMNS = {
    "companyInfo": "company_info",
    "applicantInfo": "applicant_info",
    "inventors": "inventors",
    "comments": "comments",
}

# (key, message label), checked in this order
COMPANY_TEXT_REQUIREMENTS = [
    ("name", "Company name"),
    ("address", "Company address"),
    ("pinCode", "Company PIN code"),
    ("gstNumber", "GST number"),
]
INVENTOR_REQUIREMENTS = [
    ("name", "name"),
    ("address", "address"),
    ("pinCode", "PIN code"),
    ("nationality", "nationality"),
]


@dataclass
class LifecyclePatch:
    """Column changes plus the history entry that records them."""

    changes: Dict[str, Any]
    event: str
    context: Dict[str, Any] = field(default_factory=dict)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def compute_expiry(now: datetime, days: int) -> datetime:
    return now + timedelta(days=days)


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def ensure_not_expired(invitation, now: datetime) -> None:
    """Every client-facing operation calls this before looking at status."""
    if now > invitation.expires_at:
        raise Expired()


def ensure_not_completed(invitation) -> None:
    if invitation.status == InvitationStatus.COMPLETED.value:
        raise AlreadyCompleted()


def sanitize_payload(locked_fields: Optional[List[str]], payload: Dict[str, Any]) -> Dict[str, Any]:
    """Drop locked sections and unknown keys from a client payload."""
    locked = set(locked_fields or [])
    return {
        key: value
        for key, value in (payload or {}).items()
        if key in PAYLOAD_COLUMNS and key not in locked
    }


def effective_company_info(invitation, sanitized: Dict[str, Any]) -> Dict[str, Any]:
    """Stored company info when locked, else stored info with payload keys over it."""
    stored = dict(invitation.company_info or {})
    if invitation.is_company_info_locked:
        return stored
    return {**stored, **(sanitized.get("companyInfo") or {})}


def effective_inventors(invitation, sanitized: Dict[str, Any]) -> List[Dict[str, Any]]:
    inventors = sanitized.get("inventors")
    if isinstance(inventors, list) and inventors:
        return inventors
    return list(invitation.inventors or [])


def validate_for_submission(company_info: Dict[str, Any], inventors: List[Dict[str, Any]]) -> None:
    """
    Check effective data is complete, stopping at the first gap.

    Messages name both a readable label and the field path, e.g.
    ``"GST number is required (companyInfo.gstNumber)."``.

    Raises:
        ValidationFailed: with ``field`` set to the path of the gap
    """
    company_info = company_info or {}

    for key, label in COMPANY_TEXT_REQUIREMENTS:
        if is_blank(company_info.get(key)):
            path = f"companyInfo.{key}"
            raise ValidationFailed(f"{label} is required ({path}).", path)

    if not _has_document(company_info.get("gstCertificate")):
        raise ValidationFailed(
            "GST certificate upload is required (companyInfo.gstCertificate).",
            "companyInfo.gstCertificate",
        )

    if is_blank(company_info.get("entityType")):
        raise ValidationFailed(
            "Entity type is required (companyInfo.entityType).",
            "companyInfo.entityType",
        )

    if not _has_document(company_info.get("entityCertificate")):
        raise ValidationFailed(
            "Entity certificate upload is required (companyInfo.entityCertificate).",
            "companyInfo.entityCertificate",
        )

    if not inventors:
        raise ValidationFailed("At least one inventor is required (inventors).", "inventors")

    for index, inventor in enumerate(inventors):
        inventor = inventor or {}
        for key, label in INVENTOR_REQUIREMENTS:
            if is_blank(inventor.get(key)):
                path = f"inventors[{index}].{key}"
                raise ValidationFailed(
                    f"Inventor {index + 1} {label} is required ({path}).", path
                )


def _has_document(descriptor) -> bool:
    return isinstance(descriptor, dict) and not is_blank(descriptor.get("secureUrl"))


def _merge_sections(invitation, sanitized: Dict[str, Any]) -> Dict[str, Any]:
    """Column values produced by merging a sanitized payload into the record."""
    changes = {}
    if "companyInfo" in sanitized and sanitized["companyInfo"] is not None:
        changes["company_info"] = {**(invitation.company_info or {}), **sanitized["companyInfo"]}
    if "applicantInfo" in sanitized and sanitized["applicantInfo"] is not None:
        changes["applicant_info"] = {**(invitation.applicant_info or {}), **sanitized["applicantInfo"]}
    if isinstance(sanitized.get("inventors"), list):
        changes["inventors"] = copy.deepcopy(sanitized["inventors"])
    if sanitized.get("comments") is not None:
        changes["comments"] = sanitized["comments"]
    return changes


def build_draft_patch(invitation, payload: Dict[str, Any], now: datetime) -> LifecyclePatch:
    """Save the client's in-progress answers; pending and draft both become draft."""
    ensure_not_expired(invitation, now)
    ensure_not_completed(invitation)

    sanitized = sanitize_payload(invitation.locked_fields, payload)
    changes = _merge_sections(invitation, sanitized)
    changes["status"] = InvitationStatus.DRAFT.value

    return LifecyclePatch(
        changes=changes,
        event="draft_saved",
        context={"fields": sorted(sanitized.keys())},
    )


def build_submit_patch(invitation, payload: Dict[str, Any], now: datetime) -> LifecyclePatch:
    ensure_not_expired(invitation, now)
    ensure_not_completed(invitation)

    sanitized = sanitize_payload(invitation.locked_fields, payload)
    company_info = effective_company_info(invitation, sanitized)
    inventors = effective_inventors(invitation, sanitized)
    validate_for_submission(company_info, inventors)

    changes = _merge_sections(invitation, sanitized)
    changes["inventors"] = copy.deepcopy(inventors)
    changes["status"] = InvitationStatus.COMPLETED.value
    changes["submitted_at"] = now

    return LifecyclePatch(
        changes=changes,
        event="form_submitted",
        context={"inventorCount": len(inventors)},
    )


def check_upload_allowed(invitation, field_name: str, now: datetime) -> None:
    """Run before bytes reach storage so rejected uploads store nothing."""
    ensure_not_expired(invitation, now)
    if field_name not in DOCUMENT_FIELDS:
        raise UnsupportedUploadField(
            f"Unsupported upload field '{field_name}'. Must be one of {', '.join(DOCUMENT_FIELDS)}"
        )
    if invitation.is_company_info_locked and _has_document((invitation.company_info or {}).get(field_name)):
        raise FieldLocked("Company information is locked and this document is already on file")


def build_upload_patch(invitation, field_name: str, descriptor: Dict[str, Any], now: datetime) -> LifecyclePatch:
    check_upload_allowed(invitation, field_name, now)

    changes = {"company_info": {**(invitation.company_info or {}), field_name: descriptor}}
    if invitation.status == InvitationStatus.PENDING.value:
        changes["status"] = InvitationStatus.DRAFT.value

    return LifecyclePatch(
        changes=changes,
        event="document_uploaded",
        context={"fieldName": field_name, "publicId": descriptor.get("publicId")},
    )


def build_resend_patch(invitation, new_token: str, now: datetime, expiry_days: int, admin_name: Optional[str]) -> LifecyclePatch:
    """Start a new episode on the same record; the previous token stops resolving."""
    return LifecyclePatch(
        changes={
            "token": new_token,
            "status": InvitationStatus.PENDING.value,
            "expires_at": compute_expiry(now, expiry_days),
            "invited_at": now,
            "last_invitation_sent": now,
            "admin_name": admin_name or invitation.admin_name,
        },
        event="invitation_resent",
        context={"adminName": admin_name, "previousStatus": invitation.status},
    )


def build_admin_patch(invitation, changes: list, admin_name: Optional[str]) -> LifecyclePatch:
    """
    Turn typed admin edits into column changes.

    Admins may edit locked sections; each change is one of the
    ``AdminFieldChange`` variants from the schema layer.
    """
    company_info = dict(invitation.company_info or {})
    applicant_info = dict(invitation.applicant_info or {})
    columns: Dict[str, Any] = {}
    paths = []

    for change in changes:
        section, _, key = change.field.partition(".")
        if section == COMPANY_INFO:
            company_info[key] = change.value
            columns["company_info"] = company_info
        elif section == "applicantInfo":
            applicant_info[key] = change.value
            columns["applicant_info"] = applicant_info
        elif section == "inventors":
            columns["inventors"] = [inventor.model_dump() for inventor in change.value]
        elif section == "comments":
            columns["comments"] = change.value
        else:
            raise ValueError(f"Unsupported field: {change.field}")
        paths.append(change.field)

    return LifecyclePatch(
        changes=columns,
        event="admin_edited",
        context={"fields": paths, "adminName": admin_name},
    )
