"""
Primary Invitation History Model
Append-only event log for primary invitations
"""
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from intake import db
from intake.models import JSONType


class PrimaryInvitationHistory(db.Model):
    """
    History entry for a primary invitation.
    Rows are inserted, never updated.
    """
    __tablename__ = 'primary_invitation_history'

    id = db.Column(Integer, primary_key=True)

    invitation_id = db.Column(
        Integer,
        ForeignKey('primary_invitations.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    event = db.Column(String(50), nullable=False, index=True)
    context = db.Column(JSONType)

    created_at = db.Column(DateTime, nullable=False, default=datetime.utcnow)

    invitation = relationship('PrimaryInvitation', back_populates='history')

    VALID_EVENTS = {
        'invitation_sent',
        'invitation_resent',
        'draft_saved',
        'form_submitted',
        'document_uploaded',
        'admin_edited',
    }

    def __repr__(self):
        return f'<PrimaryInvitationHistory {self.event} - invitation_id={self.invitation_id}>'

    @classmethod
    def log_event(cls, invitation, event, context=None):
        """
        Append a history entry to an invitation.

        Args:
            invitation: PrimaryInvitation the entry belongs to
            event: Event name (must be in VALID_EVENTS)
            context: Additional details as dict

        Returns:
            PrimaryInvitationHistory: Created entry
        """
        if event not in cls.VALID_EVENTS:
            raise ValueError(f"Invalid event: {event}. Must be one of {cls.VALID_EVENTS}")

        entry = cls(event=event, context=context or {}, created_at=datetime.utcnow())
        invitation.history.append(entry)
        # Note: Caller must commit the session

        return entry

    def to_dict(self):
        return {
            'id': self.id,
            'event': self.event,
            'context': self.context or {},
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
