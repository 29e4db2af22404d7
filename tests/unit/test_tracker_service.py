"""
Unit tests for TrackerService
"""
import pytest
from datetime import date, datetime, timedelta
from unittest.mock import patch

from conftest import effort
from intake.errors import Expired, NotFound, TRACKER_LINK_MESSAGE
from intake.models import Employee, WorkEntry
from intake.services.email_service import DispatchResult
from intake.services.tracker_service import TrackerService


@pytest.fixture
def tracker_email():
    with patch("intake.services.tracker_service.EmailService") as email_service:
        email_service.send_tracker_reminder.return_value = DispatchResult(success=True, message_id="<r@example.com>")
        yield email_service


@pytest.mark.unit
class TestEmployeeRoster:
    """Tests for employee management"""

    def test_create_employee_normalizes_email(self, db):
        employee = TrackerService.create_employee({"name": " Meera ", "email": "Meera@Example.com "})
        assert employee.name == "Meera"
        assert employee.email == "meera@example.com"
        assert employee.status == "active"

    def test_duplicate_email_rejected(self, db, sample_employee):
        with pytest.raises(ValueError, match="already exists"):
            TrackerService.create_employee({"name": "Other", "email": "MEERA@example.com"})

    def test_update_ignores_unknown_fields(self, db, sample_employee):
        employee = TrackerService.update_employee(
            sample_employee.id,
            {"designation": "Lead Analyst", "tracker_token": "forged"},
        )
        assert employee.designation == "Lead Analyst"
        assert employee.tracker_token is None

    def test_list_filters_status_and_search(self, db, sample_employee):
        TrackerService.create_employee({"name": "Arun", "email": "arun@example.com", "status": "inactive"})

        assert [e.email for e in TrackerService.list_employees()] == ["meera@example.com"]
        assert len(TrackerService.list_employees(status="all")) == 2
        assert [e.name for e in TrackerService.list_employees(status="all", search="aru")] == ["Arun"]

    def test_delete_missing_employee(self, db):
        with pytest.raises(NotFound):
            TrackerService.delete_employee(999)


@pytest.mark.unit
class TestReminders:
    """Tests for sending reminders"""

    def test_tracker_token_reused_until_expiry(self, db, sample_employee):
        now = datetime.utcnow()
        token = TrackerService.ensure_tracker_token(sample_employee, now)
        assert sample_employee.tracker_token_expires_at == now + timedelta(hours=48)
        assert TrackerService.ensure_tracker_token(sample_employee, now + timedelta(hours=47)) == token
        assert TrackerService.ensure_tracker_token(sample_employee, now + timedelta(hours=49)) != token

    def test_send_reminders_to_active_employees(self, db, sample_employee, tracker_email):
        TrackerService.create_employee({"name": "Arun", "email": "arun@example.com", "status": "inactive"})

        results = TrackerService.send_reminders()

        assert results == {"total": 1, "successful": 1, "failed": 0, "errors": []}
        kwargs = tracker_email.send_tracker_reminder.call_args.kwargs
        assert kwargs["to_email"] == "meera@example.com"
        assert kwargs["subject"] == "Daily Work Tracker Reminder"

        employee = db.session.get(Employee, sample_employee.id)
        assert kwargs["tracker_link"].endswith(f"/tracker/{employee.tracker_token}")
        assert employee.last_reminder_sent_at is not None

    def test_send_reminders_reports_failures(self, db, sample_employee, tracker_email):
        tracker_email.send_tracker_reminder.return_value = DispatchResult(success=False, error="mailbox full")

        results = TrackerService.send_reminders()

        assert results["failed"] == 1
        assert results["errors"][0]["error"] == "mailbox full"
        assert db.session.get(Employee, sample_employee.id).last_reminder_sent_at is None


@pytest.mark.unit
class TestTrackerForm:
    """Tests for resolving tracker links"""

    def test_unknown_token(self, db, sample_employee):
        with pytest.raises(NotFound) as exc:
            TrackerService.get_employee_by_tracker_token("nope")
        assert exc.value.message == TRACKER_LINK_MESSAGE

    def test_expired_token(self, db, sample_employee, tracker_token):
        later = sample_employee.tracker_token_expires_at + timedelta(seconds=1)
        with pytest.raises(Expired) as exc:
            TrackerService.get_employee_by_tracker_token(tracker_token, now=later)
        assert exc.value.status_code == 410

    def test_form_context(self, db, sample_employee, tracker_token):
        context = TrackerService.get_form_context(tracker_token)

        today = TrackerService.local_today()
        assert context["employeeId"] == sample_employee.id
        assert context["name"] == "Meera Iyer"
        assert context["currentDate"] == today.isoformat()
        assert context["weekday"] == today.strftime("%A")
        assert context["existingEntry"] is None

    def test_form_context_includes_todays_entry(self, db, tracker_token):
        TrackerService.submit_work_entry(tracker_token, {"arrivalTime": "09:30", "entries": [effort()]})
        context = TrackerService.get_form_context(tracker_token)
        assert context["existingEntry"]["arrivalTime"] == "09:30"
        assert context["existingEntry"]["entries"][0]["projectName"] == "Acme sensor"


@pytest.mark.unit
class TestWorkEntries:
    """Tests for saving and listing daily work entries"""

    def test_submit_creates_entry(self, db, sample_employee, tracker_token):
        work_entry = TrackerService.submit_work_entry(
            tracker_token,
            {
                "arrivalTime": "09:30",
                "date": date(2026, 10, 15),
                "entries": [effort(), effort(effortType="Drawing", hours=2)],
            },
            metadata={"ip_address": "10.0.0.7", "user_agent": "pytest"},
        )

        assert work_entry.entry_date == date(2026, 10, 15)
        assert work_entry.weekday == "Thursday"
        assert work_entry.total_hours == 7.5
        assert len(work_entry.entries) == 2
        assert work_entry.ip_address == "10.0.0.7"
        assert db.session.get(Employee, sample_employee.id).last_submission_at is not None

    def test_same_day_submission_replaces_entry(self, db, tracker_token):
        first = TrackerService.submit_work_entry(
            tracker_token, {"arrivalTime": "09:30", "date": date(2026, 10, 15), "entries": [effort()]}
        )
        second = TrackerService.submit_work_entry(
            tracker_token, {"arrivalTime": "10:00", "date": date(2026, 10, 15), "entries": [effort(hours=3)]}
        )

        assert second.id == first.id
        assert db.session.query(WorkEntry).count() == 1
        assert second.arrival_time == "10:00"
        assert second.total_hours == 3

    def test_defaults_to_today(self, db, tracker_token):
        work_entry = TrackerService.submit_work_entry(tracker_token, {"arrivalTime": "09:30", "entries": [effort()]})
        assert work_entry.entry_date == TrackerService.local_today()

    def test_duplicate_effort_lines_rejected(self, db, tracker_token):
        entries = [effort(), effort(projectName=" acme SENSOR ", hours=1)]
        with pytest.raises(ValueError, match="Duplicate effort type"):
            TrackerService.submit_work_entry(tracker_token, {"arrivalTime": "09:30", "entries": entries})
        assert db.session.query(WorkEntry).count() == 0

    def test_same_project_different_docket_allowed(self):
        TrackerService.check_duplicate_efforts([effort(), effort(docketNumber="IN-2026-015")])

    def test_expired_token_saves_nothing(self, db, sample_employee, tracker_token):
        sample_employee.tracker_token_expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()
        with pytest.raises(Expired):
            TrackerService.submit_work_entry(tracker_token, {"arrivalTime": "09:30", "entries": [effort()]})
        assert db.session.query(WorkEntry).count() == 0

    def test_list_filters_by_date_and_employee(self, db, sample_employee, tracker_token):
        for day in (14, 15, 16):
            TrackerService.submit_work_entry(
                tracker_token, {"arrivalTime": "09:30", "date": date(2026, 10, day), "entries": [effort()]}
            )
        other = TrackerService.create_employee({"name": "Arun", "email": "arun@example.com"})
        db.session.add(WorkEntry(employee_id=other.id, entry_date=date(2026, 10, 15), arrival_time="11:00"))
        db.session.commit()

        entries = TrackerService.list_work_entries(start_date=date(2026, 10, 15), end_date=date(2026, 10, 16))
        assert [(e.entry_date.day, e.employee_id) for e in entries][0] == (16, sample_employee.id)
        assert len(entries) == 3

        mine = TrackerService.list_work_entries(employee_id=sample_employee.id)
        assert [e.entry_date.day for e in mine] == [16, 15, 14]

    def test_deleting_employee_removes_entries(self, db, sample_employee, tracker_token):
        TrackerService.submit_work_entry(tracker_token, {"arrivalTime": "09:30", "entries": [effort()]})
        TrackerService.delete_employee(sample_employee.id)
        assert db.session.query(WorkEntry).count() == 0


@pytest.mark.unit
class TestTrackerSettings:
    """Tests for reminder settings"""

    def test_defaults_created_on_first_read(self, db):
        tracker_settings = TrackerService.get_settings()
        assert tracker_settings.cron_status == "active"
        assert tracker_settings.cron_time == "18:00"
        assert tracker_settings.timezone == "Asia/Kolkata"
        assert tracker_settings.days_active == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

    def test_update_settings(self, db):
        tracker_settings = TrackerService.update_settings(
            {"cron_time": "09:15", "days_active": ["Saturday"], "additional_recipients": ["Boss@Example.com"]},
            updated_by="admin@example.com",
        )
        assert tracker_settings.cron_time == "09:15"
        assert tracker_settings.days_active == ["Saturday"]
        assert tracker_settings.additional_recipients == ["boss@example.com"]
        assert tracker_settings.updated_by == "admin@example.com"

        next_fire = TrackerService.next_fire_time(tracker_settings)
        assert next_fire.weekday() == 5
        assert (next_fire.hour, next_fire.minute) == (9, 15)

    def test_invalid_timezone_rejected(self, db):
        with pytest.raises(ValueError):
            TrackerService.update_settings({"timezone": "Atlantis/Capital"})
        assert TrackerService.get_settings().timezone == "Asia/Kolkata"

    def test_paused_has_no_next_run(self, db):
        tracker_settings = TrackerService.update_settings({"cron_status": "paused"})
        assert TrackerService.next_fire_time(tracker_settings) is None

    def test_update_rearms_running_scheduler(self, app, db):
        with patch.dict(app.extensions, {"tracker_scheduler": _FakeScheduler()}):
            TrackerService.update_settings({"cron_time": "20:00"})
            scheduler = app.extensions["tracker_scheduler"]
        assert scheduler.schedules[-1].time == "20:00"


class _FakeScheduler:
    def __init__(self):
        self.schedules = []

    def reschedule(self, schedule):
        self.schedules.append(schedule)
        return None
