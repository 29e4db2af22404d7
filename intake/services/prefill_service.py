"""
Auto-prefill for primary invitations.

A company that comes back for a new filing gets its earlier company,
applicant and inventor details copied in, and the company section locked
so two invitations for the same email cannot describe different entities.
"""
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from intake import db
from intake.models import PrimaryInvitation
from intake.models.primary_invitation import COMPANY_INFO, empty_applicant_info, empty_company_info
from intake.services.invitation_lifecycle import is_blank, normalize_email

logger = logging.getLogger(__name__)


@dataclass
class PrefillResult:
    company_info: Dict[str, Any] = field(default_factory=empty_company_info)
    applicant_info: Dict[str, Any] = field(default_factory=empty_applicant_info)
    inventors: List[Dict[str, Any]] = field(default_factory=list)
    comments: str = ""
    previous_invitation_id: Optional[int] = None
    enabled: bool = False
    locked_fields: List[str] = field(default_factory=list)


class PrefillService:
    """Resolves prefill data from the latest invitation for an email."""

    @staticmethod
    def find_latest(email: str) -> Optional[PrimaryInvitation]:
        """Most recently updated invitation for the email, any status."""
        stmt = (
            select(PrimaryInvitation)
            .where(PrimaryInvitation.email == normalize_email(email))
            .order_by(PrimaryInvitation.updated_at.desc(), PrimaryInvitation.id.desc())
            .limit(1)
        )
        return db.session.execute(stmt).scalars().first()

    @staticmethod
    def from_invitation(previous: Optional[PrimaryInvitation]) -> PrefillResult:
        """
        Build prefill data from a prior invitation.

        Records without a company name are treated as abandoned and give
        no prefill.
        """
        if previous is None or is_blank((previous.company_info or {}).get("name")):
            return PrefillResult()

        return PrefillResult(
            company_info=copy.deepcopy(previous.company_info),
            applicant_info=copy.deepcopy(previous.applicant_info or empty_applicant_info()),
            inventors=copy.deepcopy(previous.inventors or []),
            comments=previous.comments or "",
            previous_invitation_id=previous.id,
            enabled=True,
            locked_fields=[COMPANY_INFO],
        )

    @staticmethod
    def resolve(email: str) -> PrefillResult:
        previous = PrefillService.find_latest(email)
        result = PrefillService.from_invitation(previous)
        if result.enabled:
            logger.info(
                f"Prefilling invitation for {normalize_email(email)} from invitation {result.previous_invitation_id}"
            )
        return result
