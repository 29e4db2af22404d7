"""
Primary Invitation Service
Business logic for sending primary invitations and driving the client form
"""
import base64
import binascii
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select

from intake import db
from intake.errors import DispatchFailed, IntakeError, NotFound, UploadFailed
from intake.models import PrimaryInvitation, PrimaryInvitationHistory
from intake.models.primary_invitation import InvitationStatus
from intake.services import invitation_lifecycle as lifecycle
from intake.services.email_service import DispatchResult, EmailService
from intake.services.file_storage import FileStorageService, StorageError
from intake.services.prefill_service import PrefillService
from config.settings import settings

logger = logging.getLogger(__name__)


def _token_ref(token: str) -> str:
    return f"{token[:8]}..." if token else "<none>"


class PrimaryInvitationService:
    """Service for primary invitations"""

    # Admin operations

    @staticmethod
    def build_invitation_link(token: str) -> str:
        return f"{settings.frontend_base_url}{settings.primary_invitation_path}/{token}"

    @staticmethod
    def _dispatch(invitation: PrimaryInvitation) -> DispatchResult:
        return EmailService.send_primary_invitation(
            to_email=invitation.email,
            admin_name=invitation.admin_name,
            invitation_link=PrimaryInvitationService.build_invitation_link(invitation.token),
            expires_on=invitation.expires_at.strftime("%B %d, %Y"),
        )

    @staticmethod
    def _apply(invitation: PrimaryInvitation, patch: lifecycle.LifecyclePatch) -> None:
        """Write a lifecycle patch to the record and append its history entry."""
        for column, value in patch.changes.items():
            setattr(invitation, column, value)
        invitation.updated_at = datetime.utcnow()
        PrimaryInvitationHistory.log_event(invitation, patch.event, patch.context)

    @staticmethod
    def create_invitation(email: str, admin_name: Optional[str] = None) -> PrimaryInvitation:
        """
        Create an invitation and email its link.

        The record is committed only after the email is accepted; if the
        dispatch fails the insert is rolled back.

        Args:
            email: Recipient email
            admin_name: Display name of the inviting admin

        Returns:
            PrimaryInvitation: Committed invitation

        Raises:
            ValueError: If the email is empty
            DispatchFailed: If the email could not be sent
        """
        email = lifecycle.normalize_email(email)
        if not email or '@' not in email:
            raise ValueError("Invalid email address")

        prefill = PrefillService.resolve(email)
        now = datetime.utcnow()

        invitation = PrimaryInvitation(
            email=email,
            admin_name=admin_name,
            token=PrimaryInvitation.generate_token(email),
            status=InvitationStatus.PENDING.value,
            expires_at=lifecycle.compute_expiry(now, settings.invitation_expiry_days),
            invited_at=now,
            last_invitation_sent=now,
            company_info=prefill.company_info,
            applicant_info=prefill.applicant_info,
            inventors=prefill.inventors,
            comments=prefill.comments,
            auto_prefill_enabled=prefill.enabled,
            previous_invitation_id=prefill.previous_invitation_id,
            locked_fields=prefill.locked_fields,
        )
        db.session.add(invitation)
        db.session.flush()

        PrimaryInvitationHistory.log_event(
            invitation,
            'invitation_sent',
            {'adminName': admin_name, 'autoPrefill': prefill.enabled},
        )

        result = PrimaryInvitationService._dispatch(invitation)
        if not result.success:
            db.session.rollback()
            logger.error(f"Invitation email to {email} failed, record rolled back: {result.error}")
            raise DispatchFailed(f"Failed to send invitation email to {email}: {result.error}")

        db.session.commit()
        logger.info(
            f"Created primary invitation {invitation.id} for {email} "
            f"(prefill={prefill.enabled}, message_id={result.message_id})"
        )
        return invitation

    @staticmethod
    def send_bulk(emails: List[str], admin_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Send invitations to several recipients; one failure does not stop the rest.

        Returns:
            Dict with total, successful, failed, successes and failures
        """
        successes = []
        failures = []

        for email in emails:
            try:
                invitation = PrimaryInvitationService.create_invitation(email, admin_name)
                successes.append({'email': invitation.email, 'id': invitation.id})
            except (IntakeError, ValueError) as e:
                failures.append({'email': email, 'error': str(e)})

        logger.info(f"Bulk invitations: {len(successes)} sent, {len(failures)} failed")
        return {
            'total': len(emails),
            'successful': len(successes),
            'failed': len(failures),
            'successes': successes,
            'failures': failures,
        }

    @staticmethod
    def resend_invitation(email: str, admin_name: Optional[str] = None) -> PrimaryInvitation:
        """
        Issue a new token on the latest invitation for an email and re-send it.

        Raises:
            NotFound: If there is no invitation for the email
            DispatchFailed: If the email could not be sent (the old token stays valid)
        """
        email = lifecycle.normalize_email(email)
        stmt = (
            select(PrimaryInvitation)
            .where(PrimaryInvitation.email == email)
            .order_by(PrimaryInvitation.updated_at.desc(), PrimaryInvitation.id.desc())
            .limit(1)
            .with_for_update()
        )
        invitation = db.session.execute(stmt).scalars().first()
        if not invitation:
            raise NotFound(f"No invitation found for {email}")

        old_token = invitation.token
        patch = lifecycle.build_resend_patch(
            invitation,
            new_token=PrimaryInvitation.generate_token(email),
            now=datetime.utcnow(),
            expiry_days=settings.invitation_expiry_days,
            admin_name=admin_name,
        )
        PrimaryInvitationService._apply(invitation, patch)

        result = PrimaryInvitationService._dispatch(invitation)
        if not result.success:
            db.session.rollback()
            logger.error(f"Resend to {email} failed, keeping token {_token_ref(old_token)}: {result.error}")
            raise DispatchFailed(f"Failed to resend invitation email to {email}: {result.error}")

        db.session.commit()
        logger.info(f"Resent invitation {invitation.id} to {email}; token {_token_ref(old_token)} superseded")
        return invitation

    @staticmethod
    def list_invitations(status: Optional[str] = None, limit: int = 50) -> List[PrimaryInvitation]:
        stmt = select(PrimaryInvitation)
        if status:
            stmt = stmt.where(PrimaryInvitation.status == status)
        stmt = stmt.order_by(PrimaryInvitation.created_at.desc(), PrimaryInvitation.id.desc()).limit(min(limit, 100))
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def list_completed(page: int = 1, limit: int = 20, search: Optional[str] = None) -> Dict[str, Any]:
        """
        Completed submissions, newest first.

        ``search`` matches email, company name or GST number, case-insensitively.
        """
        limit = min(limit, 100)
        stmt = select(PrimaryInvitation).where(
            PrimaryInvitation.status == InvitationStatus.COMPLETED.value
        )

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(
                PrimaryInvitation.email.ilike(pattern),
                PrimaryInvitation.company_info['name'].as_string().ilike(pattern),
                PrimaryInvitation.company_info['gstNumber'].as_string().ilike(pattern),
            ))

        total = db.session.scalar(select(func.count()).select_from(stmt.subquery()))

        stmt = (
            stmt.order_by(PrimaryInvitation.submitted_at.desc(), PrimaryInvitation.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        results = db.session.execute(stmt).scalars().all()

        return {
            'page': page,
            'pageSize': limit,
            'total': total,
            'hasMore': page * limit < total,
            'results': [invitation.to_dict() for invitation in results],
        }

    @staticmethod
    def get_invitation(invitation_id: int, lock: bool = False) -> PrimaryInvitation:
        stmt = select(PrimaryInvitation).where(PrimaryInvitation.id == invitation_id)
        if lock:
            stmt = stmt.with_for_update()
        invitation = db.session.execute(stmt).scalars().first()
        if not invitation:
            raise NotFound(f"Invitation {invitation_id} not found")
        return invitation

    @staticmethod
    def get_completed(invitation_id: int) -> PrimaryInvitation:
        invitation = PrimaryInvitationService.get_invitation(invitation_id)
        if invitation.status != InvitationStatus.COMPLETED.value:
            raise NotFound(f"Completed invitation {invitation_id} not found")
        return invitation

    @staticmethod
    def get_history(invitation_id: int) -> List[Dict[str, Any]]:
        invitation = PrimaryInvitationService.get_invitation(invitation_id)
        return [entry.to_dict() for entry in invitation.history]

    @staticmethod
    def apply_admin_edit(invitation_id: int, changes: list, admin_name: Optional[str] = None) -> PrimaryInvitation:
        """
        Apply typed admin edits; locked sections may be edited by admins.

        Args:
            invitation_id: Invitation to edit
            changes: ``AdminFieldChange`` items from ``AdminEditSchema``
            admin_name: Recorded in the history entry
        """
        invitation = PrimaryInvitationService.get_invitation(invitation_id, lock=True)
        patch = lifecycle.build_admin_patch(invitation, changes, admin_name)
        PrimaryInvitationService._apply(invitation, patch)
        db.session.commit()

        logger.info(f"Admin {admin_name} edited invitation {invitation_id}: {patch.context['fields']}")
        return invitation

    # Client (token) operations

    @staticmethod
    def _get_by_token(token: str, lock: bool = False) -> PrimaryInvitation:
        stmt = select(PrimaryInvitation).where(PrimaryInvitation.token == token)
        if lock:
            stmt = stmt.with_for_update()
        invitation = db.session.execute(stmt).scalars().first()
        if not invitation:
            raise NotFound()
        return invitation

    @staticmethod
    def get_client_view(token: str) -> Dict[str, Any]:
        """
        Raises:
            NotFound: Unknown token
            Expired: Token past its expiry
        """
        invitation = PrimaryInvitationService._get_by_token(token)
        lifecycle.ensure_not_expired(invitation, datetime.utcnow())
        return invitation.to_client_dict()

    @staticmethod
    def save_draft(token: str, payload: Dict[str, Any]) -> PrimaryInvitation:
        invitation = PrimaryInvitationService._get_by_token(token, lock=True)
        patch = lifecycle.build_draft_patch(invitation, payload, datetime.utcnow())
        PrimaryInvitationService._apply(invitation, patch)
        db.session.commit()

        logger.info(f"Draft saved for invitation {invitation.id} ({_token_ref(token)}): {patch.context['fields']}")
        return invitation

    @staticmethod
    def submit(token: str, payload: Dict[str, Any]) -> PrimaryInvitation:
        """
        Raises:
            NotFound, Expired, AlreadyCompleted, ValidationFailed
        """
        invitation = PrimaryInvitationService._get_by_token(token, lock=True)
        patch = lifecycle.build_submit_patch(invitation, payload, datetime.utcnow())
        PrimaryInvitationService._apply(invitation, patch)
        db.session.commit()

        logger.info(f"Invitation {invitation.id} submitted by {invitation.email}")
        return invitation

    @staticmethod
    def decode_file_data(data: str) -> bytes:
        """Decode base64 content, accepting a ``data:<mime>;base64,`` prefix."""
        if data.startswith('data:'):
            _, _, data = data.partition(',')
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("File data must be base64 encoded") from e

    @staticmethod
    def upload_document(
        token: str,
        field_name: str,
        file_data: str,
        filename: str,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Store a company document and attach its descriptor to the form.

        Returns:
            The stored document descriptor

        Raises:
            NotFound, Expired, UnsupportedUploadField, FieldLocked, UploadFailed,
            ValueError (bad base64)
        """
        invitation = PrimaryInvitationService._get_by_token(token, lock=True)
        lifecycle.check_upload_allowed(invitation, field_name, datetime.utcnow())

        content = PrimaryInvitationService.decode_file_data(file_data)

        try:
            stored = FileStorageService().upload(
                content,
                folder=f"primary-invitations/{invitation.email}",
                filename=filename,
                content_type=content_type,
            )
        except StorageError as e:
            db.session.rollback()
            logger.error(f"Upload of {field_name} for invitation {invitation.id} failed: {e}")
            raise UploadFailed(str(e)) from e

        descriptor = {
            'publicId': stored['public_id'],
            'url': stored['url'],
            'secureUrl': stored['secure_url'],
            'originalFilename': stored['original_filename'],
            'bytes': stored['bytes'],
            'format': stored['format'],
            'uploadedAt': stored['created_at'],
        }

        patch = lifecycle.build_upload_patch(invitation, field_name, descriptor, datetime.utcnow())
        PrimaryInvitationService._apply(invitation, patch)
        db.session.commit()

        logger.info(f"Stored {field_name} for invitation {invitation.id}: {descriptor['publicId']}")
        return descriptor
