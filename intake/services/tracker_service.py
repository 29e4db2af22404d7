"""
Tracker Service
Employee roster, tracker links and reminder settings for the work tracker
"""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context
from sqlalchemy import or_, select

from intake import db
from intake.errors import Expired, NotFound, TRACKER_LINK_MESSAGE
from intake.models import Employee, TrackerSettings, WorkEntry
from intake.services.email_service import EmailService
from intake.services.invitation_lifecycle import normalize_email
from intake.services.tracker_scheduler import (
    compute_next_fire_time,
    day_of_week_expression,
    parse_time,
    validate_timezone,
)
from config.settings import settings

logger = logging.getLogger(__name__)


class TrackerService:
    """Service for the work tracker roster and reminders"""

    EMPLOYEE_FIELDS = ("name", "email", "designation", "department", "employee_code", "status")

    # Employees

    @staticmethod
    def list_employees(status: Optional[str] = "active", search: Optional[str] = None) -> List[Employee]:
        stmt = select(Employee)
        if status and status != "all":
            stmt = stmt.where(Employee.status == status)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(
                Employee.name.ilike(pattern),
                Employee.email.ilike(pattern),
                Employee.employee_code.ilike(pattern),
            ))
        stmt = stmt.order_by(Employee.created_at.desc(), Employee.id.desc())
        return list(db.session.execute(stmt).scalars().all())

    @staticmethod
    def get_employee(employee_id: int) -> Employee:
        employee = db.session.get(Employee, employee_id)
        if not employee:
            raise NotFound("Employee not found")
        return employee

    @staticmethod
    def _email_taken(email: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Employee.id).where(Employee.email == email)
        if exclude_id is not None:
            stmt = stmt.where(Employee.id != exclude_id)
        return db.session.scalar(stmt) is not None

    @staticmethod
    def create_employee(data: Dict[str, Any]) -> Employee:
        """
        Raises:
            ValueError: If an employee with the email already exists
        """
        email = normalize_email(data["email"])
        if TrackerService._email_taken(email):
            raise ValueError("Employee with this email already exists")

        employee = Employee(
            name=data["name"].strip(),
            email=email,
            designation=data.get("designation"),
            department=data.get("department"),
            employee_code=data.get("employee_code"),
            status=data.get("status") or "active",
        )
        db.session.add(employee)
        db.session.commit()

        logger.info(f"Created employee {employee.id} ({email})")
        return employee

    @staticmethod
    def update_employee(employee_id: int, updates: Dict[str, Any]) -> Employee:
        employee = TrackerService.get_employee(employee_id)

        for key, value in updates.items():
            if key not in TrackerService.EMPLOYEE_FIELDS:
                continue
            if key == "email":
                value = normalize_email(value)
                if TrackerService._email_taken(value, exclude_id=employee.id):
                    raise ValueError("Employee with this email already exists")
            setattr(employee, key, value)

        db.session.commit()
        logger.info(f"Updated employee {employee.id}: {sorted(updates.keys())}")
        return employee

    @staticmethod
    def delete_employee(employee_id: int) -> None:
        employee = TrackerService.get_employee(employee_id)
        db.session.delete(employee)
        db.session.commit()
        logger.info(f"Deleted employee {employee_id}")

    # Reminders

    @staticmethod
    def ensure_tracker_token(employee: Employee, now: Optional[datetime] = None) -> str:
        """Reuse the employee's tracker token until it expires, then issue a new one."""
        now = now or datetime.utcnow()
        if employee.tracker_token and employee.tracker_token_expires_at and employee.tracker_token_expires_at > now:
            return employee.tracker_token

        employee.tracker_token = Employee.generate_tracker_token()
        employee.tracker_token_expires_at = now + timedelta(hours=settings.tracker_token_expiry_hours)
        return employee.tracker_token

    @staticmethod
    def get_employee_by_tracker_token(token: str, now: Optional[datetime] = None, lock: bool = False) -> Employee:
        """
        Raises:
            NotFound: No employee holds the token
            Expired: The token is past its expiry
        """
        stmt = select(Employee).where(Employee.tracker_token == token)
        if lock:
            stmt = stmt.with_for_update()
        employee = db.session.execute(stmt).scalars().first()
        if employee is None:
            raise NotFound(TRACKER_LINK_MESSAGE)

        now = now or datetime.utcnow()
        if employee.tracker_token_expires_at is None or employee.tracker_token_expires_at <= now:
            raise Expired(TRACKER_LINK_MESSAGE)
        return employee

    @staticmethod
    def build_tracker_link(token: str) -> str:
        return f"{settings.frontend_base_url}{settings.tracker_path}/{token}"

    @staticmethod
    def send_reminders() -> Dict[str, Any]:
        """
        Email every active employee their tracker link.

        Returns:
            Dict with total, successful, failed and errors
        """
        tracker_settings = TrackerService.get_settings()
        employees = TrackerService.list_employees(status="active")
        results = {"total": len(employees), "successful": 0, "failed": 0, "errors": []}

        for employee in employees:
            token = TrackerService.ensure_tracker_token(employee)
            dispatch = EmailService.send_tracker_reminder(
                to_email=employee.email,
                employee_name=employee.name,
                tracker_link=TrackerService.build_tracker_link(token),
                subject=tracker_settings.email_subject,
            )
            if dispatch.success:
                employee.last_reminder_sent_at = datetime.utcnow()
                results["successful"] += 1
            else:
                results["failed"] += 1
                results["errors"].append({
                    "employeeId": employee.id,
                    "email": employee.email,
                    "error": dispatch.error,
                })

        db.session.commit()
        logger.info(
            f"Tracker reminders: {results['successful']} sent, {results['failed']} failed of {results['total']}"
        )
        return results

    # Work entries

    @staticmethod
    def local_today(tracker_settings: Optional[TrackerSettings] = None) -> date:
        """Today's date in the tracker's timezone."""
        tracker_settings = tracker_settings or TrackerService.get_settings()
        return datetime.now(ZoneInfo(tracker_settings.timezone)).date()

    @staticmethod
    def get_form_context(token: str) -> Dict[str, Any]:
        """
        Data the tracker form needs when it opens: who is filling it in,
        today's date and any entry already saved for today.

        Raises:
            NotFound, Expired
        """
        employee = TrackerService.get_employee_by_tracker_token(token)
        today = TrackerService.local_today()
        existing = db.session.execute(
            select(WorkEntry).where(WorkEntry.employee_id == employee.id, WorkEntry.entry_date == today)
        ).scalars().first()

        return {
            "employeeId": employee.id,
            "name": employee.name,
            "email": employee.email,
            "currentDate": today.isoformat(),
            "weekday": today.strftime("%A"),
            "existingEntry": existing.to_client_dict() if existing else None,
        }

    @staticmethod
    def check_duplicate_efforts(entries: List[Dict[str, Any]]) -> None:
        """
        Raises:
            ValueError: Two lines share project, docket number and effort type
        """
        seen = set()
        for entry in entries:
            key = (
                (entry.get("projectName") or "").strip().lower(),
                (entry.get("docketNumber") or "").strip().lower(),
                entry.get("effortType"),
            )
            if key in seen:
                raise ValueError("Duplicate effort type for the same project/docket number is not allowed.")
            seen.add(key)

    @staticmethod
    def submit_work_entry(token: str, data: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> WorkEntry:
        """
        Save the day's work for the employee holding ``token``.

        A second submission for the same day replaces the first.

        Args:
            token: Tracker token from the reminder link
            data: arrivalTime, entries, and optional weekday and date
            metadata: ip_address and user_agent of the request

        Raises:
            NotFound, Expired, ValueError (duplicate effort lines)
        """
        entries = data.get("entries") or []
        TrackerService.check_duplicate_efforts(entries)

        entry_date = data.get("date") or TrackerService.local_today()
        employee = TrackerService.get_employee_by_tracker_token(token, lock=True)
        now = datetime.utcnow()

        work_entry = db.session.execute(
            select(WorkEntry)
            .where(WorkEntry.employee_id == employee.id, WorkEntry.entry_date == entry_date)
            .with_for_update()
        ).scalars().first()
        created = work_entry is None
        if created:
            work_entry = WorkEntry(employee_id=employee.id, entry_date=entry_date)
            db.session.add(work_entry)

        work_entry.arrival_time = data["arrivalTime"]
        work_entry.weekday = data.get("weekday") or entry_date.strftime("%A")
        work_entry.entries = [dict(entry) for entry in entries]
        work_entry.total_hours = round(sum(float(entry.get("hours") or 0) for entry in entries), 2)
        work_entry.submitted_at = now
        work_entry.submission_source = "tracker-form"
        if metadata:
            work_entry.ip_address = metadata.get("ip_address")
            work_entry.user_agent = (metadata.get("user_agent") or "")[:500] or None

        employee.last_submission_at = now
        db.session.commit()

        logger.info(
            f"Work entry {'created' if created else 'updated'} for employee {employee.id} "
            f"on {entry_date.isoformat()}: {len(entries)} lines, {work_entry.total_hours}h"
        )
        return work_entry

    @staticmethod
    def list_work_entries(
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
    ) -> List[WorkEntry]:
        """Entries newest day first, optionally bounded by date (inclusive) and employee."""
        stmt = select(WorkEntry)
        if start_date:
            stmt = stmt.where(WorkEntry.entry_date >= start_date)
        if end_date:
            stmt = stmt.where(WorkEntry.entry_date <= end_date)
        if employee_id:
            stmt = stmt.where(WorkEntry.employee_id == employee_id)
        stmt = stmt.order_by(WorkEntry.entry_date.desc(), WorkEntry.id.desc())
        return list(db.session.execute(stmt).scalars().all())

    # Settings

    @staticmethod
    def get_settings() -> TrackerSettings:
        """Return the settings row, creating it with defaults on first use."""
        tracker_settings = db.session.execute(
            select(TrackerSettings).order_by(TrackerSettings.id).limit(1)
        ).scalars().first()
        if tracker_settings is None:
            tracker_settings = TrackerSettings(timezone=settings.tracker_default_timezone)
            db.session.add(tracker_settings)
            db.session.commit()
            logger.info("Created default tracker settings")
        return tracker_settings

    @staticmethod
    def update_settings(updates: Dict[str, Any], updated_by: Optional[str] = None) -> TrackerSettings:
        """
        Update the reminder settings and re-arm the scheduler.

        Raises:
            ValueError: If the time, timezone or days are invalid
        """
        tracker_settings = TrackerService.get_settings()

        if "cron_time" in updates:
            parse_time(updates["cron_time"])
        if "timezone" in updates:
            validate_timezone(updates["timezone"])
        if "days_active" in updates:
            day_of_week_expression(updates["days_active"])

        for key in ("cron_status", "cron_time", "timezone", "email_subject"):
            if updates.get(key) is not None:
                setattr(tracker_settings, key, updates[key])
        if updates.get("days_active") is not None:
            tracker_settings.days_active = list(updates["days_active"])
        if updates.get("additional_recipients") is not None:
            tracker_settings.additional_recipients = [normalize_email(e) for e in updates["additional_recipients"]]
        tracker_settings.updated_by = updated_by

        db.session.commit()
        TrackerService.refresh_scheduler(tracker_settings)
        return tracker_settings

    @staticmethod
    def refresh_scheduler(tracker_settings: TrackerSettings) -> Optional[datetime]:
        """Re-arm the running scheduler; returns the next fire time."""
        schedule = tracker_settings.to_schedule()
        scheduler = current_app.extensions.get("tracker_scheduler") if has_app_context() else None
        if scheduler is None:
            return compute_next_fire_time(schedule, datetime.utcnow())
        return scheduler.reschedule(schedule)

    @staticmethod
    def next_fire_time(tracker_settings: TrackerSettings) -> Optional[datetime]:
        return compute_next_fire_time(tracker_settings.to_schedule(), datetime.utcnow())
