"""Employee model for the work tracker roster."""

import secrets

from sqlalchemy.orm import relationship

from intake import db
from intake.models import BaseModel


class Employee(BaseModel):
    """
    Employee who receives daily work tracker reminders.

    ``tracker_token`` is the capability embedded in the reminder link; it is
    reused until ``tracker_token_expires_at`` and then rotated.
    """

    __tablename__ = "employees"

    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    designation = db.Column(db.String(150), nullable=True)
    department = db.Column(db.String(150), nullable=True)
    employee_code = db.Column(db.String(50), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="active", index=True)

    tracker_token = db.Column(db.String(100), unique=True, nullable=True, index=True)
    tracker_token_expires_at = db.Column(db.DateTime, nullable=True)
    last_reminder_sent_at = db.Column(db.DateTime, nullable=True)
    last_submission_at = db.Column(db.DateTime, nullable=True)

    work_entries = relationship(
        "WorkEntry",
        back_populates="employee",
        order_by="WorkEntry.entry_date.desc()",
        cascade="all, delete-orphan",
    )

    @staticmethod
    def generate_tracker_token():
        return secrets.token_urlsafe(32)

    def to_dict(self):
        """Convert model to dictionary."""
        data = super().to_dict()
        data.update({
            "name": self.name,
            "email": self.email,
            "designation": self.designation,
            "department": self.department,
            "employee_code": self.employee_code,
            "status": self.status,
            "last_reminder_sent_at": self.last_reminder_sent_at.isoformat() if self.last_reminder_sent_at else None,
            "last_submission_at": self.last_submission_at.isoformat() if self.last_submission_at else None,
        })
        return data

    def __repr__(self):
        return f"<Employee {self.email} - {self.status}>"
