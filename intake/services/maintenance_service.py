"""
Maintenance Service
Bulk deletion of primary invitations for operators
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from intake import db
from intake.models import PrimaryInvitation
from intake.models.primary_invitation import InvitationStatus
from intake.services.invitation_lifecycle import normalize_email

logger = logging.getLogger(__name__)


class MaintenanceService:
    """Purge operations; history rows go with their invitation."""

    @staticmethod
    def select_invitations(email: Optional[str] = None, token: Optional[str] = None, all_records: bool = False):
        """
        Build the selection for a purge.

        Raises:
            ValueError: If no selector is given
        """
        if not (all_records or email or token):
            raise ValueError("Provide at least one selector (email, token or all)")

        stmt = select(PrimaryInvitation)
        if not all_records:
            if email:
                stmt = stmt.where(PrimaryInvitation.email == normalize_email(email))
            if token:
                stmt = stmt.where(PrimaryInvitation.token == token)
        return stmt

    @staticmethod
    def find_invitations(email: Optional[str] = None, token: Optional[str] = None, all_records: bool = False) -> List[PrimaryInvitation]:
        stmt = MaintenanceService.select_invitations(email, token, all_records)
        return list(db.session.execute(stmt.order_by(PrimaryInvitation.id)).scalars().all())

    @staticmethod
    def purge(invitations: List[PrimaryInvitation]) -> int:
        """Delete the given invitations and their history; returns the count."""
        ids = [invitation.id for invitation in invitations]
        if not ids:
            return 0

        # Detach prefill links first so the self-reference never blocks a delete
        db.session.execute(
            PrimaryInvitation.__table__.update()
            .where(PrimaryInvitation.previous_invitation_id.in_(ids))
            .values(previous_invitation_id=None)
        )
        for invitation in invitations:
            db.session.delete(invitation)
        db.session.commit()

        logger.info(f"Purged {len(ids)} primary invitation(s)")
        return len(ids)

    @staticmethod
    def find_expired(now: Optional[datetime] = None) -> List[PrimaryInvitation]:
        """Expired invitations that were never completed."""
        now = now or datetime.utcnow()
        stmt = (
            select(PrimaryInvitation)
            .where(
                PrimaryInvitation.expires_at < now,
                PrimaryInvitation.status != InvitationStatus.COMPLETED.value,
            )
            .order_by(PrimaryInvitation.id)
        )
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def purge_expired(now: Optional[datetime] = None) -> int:
        return MaintenanceService.purge(MaintenanceService.find_expired(now))
