"""Work tracker reminder settings (single row)."""

from intake import db
from intake.models import BaseModel, JSONType

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
DEFAULT_DAYS = WEEKDAYS[:5]


def default_days():
    return list(DEFAULT_DAYS)


class TrackerSettings(BaseModel):
    """
    Reminder schedule and email settings for the work tracker.

    Only one row is used; it is created with defaults on first read.
    """

    __tablename__ = "tracker_settings"

    cron_status = db.Column(db.String(20), nullable=False, default="active")
    cron_time = db.Column(db.String(5), nullable=False, default="18:00")
    timezone = db.Column(db.String(64), nullable=False, default="Asia/Kolkata")
    days_active = db.Column(JSONType, nullable=False, default=default_days)
    email_subject = db.Column(db.String(255), nullable=False, default="Daily Work Tracker Reminder")
    additional_recipients = db.Column(JSONType, nullable=False, default=list)
    updated_by = db.Column(db.String(255), nullable=True)

    def to_schedule(self):
        """Snapshot the schedule part of the settings."""
        from intake.services.tracker_scheduler import ReminderSchedule

        return ReminderSchedule(
            status=self.cron_status,
            time=self.cron_time,
            timezone=self.timezone,
            days=tuple(self.days_active or DEFAULT_DAYS),
        )

    def to_dict(self):
        """Convert model to dictionary."""
        data = super().to_dict()
        data.update({
            "cron_status": self.cron_status,
            "cron_time": self.cron_time,
            "timezone": self.timezone,
            "days_active": list(self.days_active or []),
            "email_subject": self.email_subject,
            "additional_recipients": list(self.additional_recipients or []),
            "updated_by": self.updated_by,
        })
        return data
