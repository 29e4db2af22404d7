"""
Primary Invitation Model
Holds one client's patent-intake form and its invitation lifecycle
"""
import enum
import secrets
from datetime import datetime

from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship

from intake import db
from intake.models import BaseModel, JSONType


class InvitationStatus(str, enum.Enum):
    """Invitation lifecycle status."""
    PENDING = "pending"
    DRAFT = "draft"
    COMPLETED = "completed"


COMPANY_INFO = "companyInfo"
ENTITY_TYPES = ["", "LLP", "LLC", "Startup", "Pvt Ltd", "Other"]
DOCUMENT_FIELDS = ("gstCertificate", "entityCertificate")


def empty_company_info():
    return {
        "name": "",
        "address": "",
        "pinCode": "",
        "gstNumber": "",
        "gstCertificate": None,
        "entityType": "",
        "entityCertificate": None,
    }


def empty_applicant_info():
    return {"name": "", "address": "", "pinCode": "", "sameAsCompany": False}


class PrimaryInvitation(BaseModel):
    """
    Primary invitation sent to a client by email.

    The token in the emailed link is a capability: whoever holds it may
    load, save and submit the form until ``expires_at``. When the record
    was prefilled from an earlier invitation for the same email,
    ``locked_fields`` names the sections clients may no longer change.
    """
    __tablename__ = 'primary_invitations'

    # Recipient
    email = db.Column(String(255), nullable=False, index=True)
    admin_name = db.Column(String(150))

    # Token and security
    token = db.Column(String(100), nullable=False, unique=True, index=True)
    expires_at = db.Column(DateTime, nullable=False, index=True)

    # Status tracking
    status = db.Column(String(20), nullable=False, default=InvitationStatus.PENDING.value, index=True)

    # Audit timestamps
    invited_at = db.Column(DateTime, nullable=False, default=datetime.utcnow)
    submitted_at = db.Column(DateTime)
    last_invitation_sent = db.Column(DateTime)

    # Form payload
    company_info = db.Column(JSONType, nullable=False, default=empty_company_info)
    applicant_info = db.Column(JSONType, nullable=False, default=empty_applicant_info)
    inventors = db.Column(JSONType, nullable=False, default=list)
    comments = db.Column(Text, nullable=False, default="")

    # Auto-prefill metadata
    auto_prefill_enabled = db.Column(Boolean, nullable=False, default=False)
    previous_invitation_id = db.Column(
        Integer,
        ForeignKey('primary_invitations.id', ondelete='SET NULL'),
        nullable=True,
    )
    locked_fields = db.Column(JSONType, nullable=False, default=list)

    history = relationship(
        'PrimaryInvitationHistory',
        back_populates='invitation',
        order_by='PrimaryInvitationHistory.id',
        cascade='all, delete-orphan',
    )

    @staticmethod
    def generate_token(seed=None):
        """
        Generate a cryptographically secure random token.

        ``seed`` (the recipient email) is accepted for call-site symmetry
        and does not influence the result. Returns a URL-safe string of
        roughly 43 characters.
        """
        return secrets.token_urlsafe(32)

    @property
    def is_expired(self):
        """Check if invitation has expired"""
        return datetime.utcnow() > self.expires_at

    @property
    def is_company_info_locked(self):
        return COMPANY_INFO in (self.locked_fields or [])

    def __repr__(self):
        return f'<PrimaryInvitation {self.email} - {self.status}>'

    def to_dict(self, include_sensitive=False):
        """
        Convert invitation to dictionary for admin views.

        Args:
            include_sensitive: If True, include the live token
        """
        data = {
            'id': self.id,
            'email': self.email,
            'admin_name': self.admin_name,
            'status': self.status,
            'invited_at': self.invited_at.isoformat() if self.invited_at else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'is_expired': self.is_expired,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
            'last_invitation_sent': self.last_invitation_sent.isoformat() if self.last_invitation_sent else None,
            'company_info': self.company_info,
            'applicant_info': self.applicant_info,
            'inventors': self.inventors,
            'comments': self.comments,
            'auto_prefill': {
                'enabled': self.auto_prefill_enabled,
                'previous_invitation_id': self.previous_invitation_id,
                'locked_fields': list(self.locked_fields or []),
            },
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_sensitive:
            data['token'] = self.token

        return data

    def to_client_dict(self):
        """Client-safe view returned to whoever holds the token."""
        return {
            'email': self.email,
            'status': self.status,
            'expiresAt': self.expires_at.isoformat() if self.expires_at else None,
            'submittedAt': self.submitted_at.isoformat() if self.submitted_at else None,
            'companyInfo': self.company_info,
            'applicantInfo': self.applicant_info,
            'inventors': self.inventors,
            'comments': self.comments,
            'autoPrefill': {
                'enabled': self.auto_prefill_enabled,
                'previousInvitationId': self.previous_invitation_id,
                'lockedFields': list(self.locked_fields or []),
            },
            'isCompanyInfoLocked': self.is_company_info_locked,
        }
