"""
Work Entry Model
One tracker submission per employee per day
"""
from datetime import datetime

from sqlalchemy import String, Integer, Date, DateTime, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from intake import db
from intake.models import BaseModel, JSONType

EFFORT_TYPES = ("Search Report", "Drafting", "Drawing", "Review")


class WorkEntry(BaseModel):
    """
    Daily work log submitted through the tracker link.

    ``entries`` holds the effort lines as the form posts them:
    ``{projectName, docketNumber, effortType, hours, notes}``.
    Resubmitting for the same day replaces the row's lines.
    """
    __tablename__ = 'work_entries'
    __table_args__ = (
        UniqueConstraint('employee_id', 'entry_date', name='uq_work_entries_employee_date'),
    )

    employee_id = db.Column(
        Integer,
        ForeignKey('employees.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    entry_date = db.Column(Date, nullable=False, index=True)
    arrival_time = db.Column(String(10), nullable=False)
    weekday = db.Column(String(15), nullable=True)

    entries = db.Column(JSONType, nullable=False, default=list)
    total_hours = db.Column(Float, nullable=False, default=0)

    submitted_at = db.Column(DateTime, nullable=False, default=datetime.utcnow)
    submission_source = db.Column(String(50), nullable=False, default='tracker-form')
    ip_address = db.Column(String(45), nullable=True)
    user_agent = db.Column(String(500), nullable=True)

    employee = relationship('Employee', back_populates='work_entries')

    def to_client_dict(self):
        """The employee's own view of the entry, in the form's keys."""
        return {
            'date': self.entry_date.isoformat(),
            'arrivalTime': self.arrival_time,
            'weekday': self.weekday,
            'entries': list(self.entries or []),
            'totalHours': self.total_hours,
            'submittedAt': self.submitted_at.isoformat() if self.submitted_at else None,
        }

    def to_dict(self):
        """Convert model to dictionary."""
        data = super().to_dict()
        data.update({
            'employee_id': self.employee_id,
            'employee': {
                'id': self.employee.id,
                'name': self.employee.name,
                'email': self.employee.email,
                'status': self.employee.status,
            } if self.employee else None,
            'entry_date': self.entry_date.isoformat(),
            'arrival_time': self.arrival_time,
            'weekday': self.weekday,
            'entries': list(self.entries or []),
            'total_hours': self.total_hours,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
            'submission_source': self.submission_source,
        })
        return data

    def __repr__(self):
        return f"<WorkEntry employee={self.employee_id} date={self.entry_date}>"
