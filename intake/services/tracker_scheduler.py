"""
Work tracker reminder scheduling.

``compute_next_fire_time`` is a pure function of a schedule and a moment.
``TrackerScheduler`` owns the one APScheduler job that sends reminders and
re-arms it whenever the stored settings change.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

DAY_ABBREVIATIONS = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}


@dataclass(frozen=True)
class ReminderSchedule:
    """When reminders go out: ``time`` is HH:MM on ``days`` in ``timezone``."""

    status: str
    time: str
    timezone: str
    days: Tuple[str, ...]

    @property
    def is_active(self) -> bool:
        return self.status == "active"


def parse_time(value: str) -> Tuple[int, int]:
    """Parse ``HH:MM`` (24h) into hour and minute."""
    try:
        hour_text, minute_text = value.split(":")
        hour, minute = int(hour_text), int(minute_text)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time '{value}'. Use HH:MM") from e
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time '{value}'. Use HH:MM")
    return hour, minute


def day_of_week_expression(days) -> str:
    """``["Monday", "Friday"]`` -> ``"mon,fri"``; abbreviations are accepted too."""
    abbreviations = []
    for day in days:
        key = (day or "").strip().lower()
        abbreviation = DAY_ABBREVIATIONS.get(key) or (key if key in DAY_ABBREVIATIONS.values() else None)
        if abbreviation is None:
            raise ValueError(f"Invalid day '{day}'")
        if abbreviation not in abbreviations:
            abbreviations.append(abbreviation)
    if not abbreviations:
        raise ValueError("At least one active day is required")
    return ",".join(abbreviations)


def validate_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone '{name}'") from e
    return name


def build_trigger(schedule: ReminderSchedule) -> CronTrigger:
    hour, minute = parse_time(schedule.time)
    return CronTrigger(
        day_of_week=day_of_week_expression(schedule.days),
        hour=hour,
        minute=minute,
        timezone=validate_timezone(schedule.timezone),
    )


def compute_next_fire_time(schedule: ReminderSchedule, now: datetime) -> Optional[datetime]:
    """
    First reminder strictly after ``now``, or None when reminders are paused.

    Naive ``now`` values are read as UTC. The result is timezone-aware in
    the schedule's timezone.
    """
    if not schedule.is_active:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    # The trigger returns fire times >= its start, so start just past now
    return build_trigger(schedule).get_next_fire_time(None, now + timedelta(microseconds=1))


class TrackerScheduler:
    """Background scheduler holding the single reminder job."""

    JOB_ID = "tracker-reminders"

    def __init__(self, app, scheduler: Optional[BackgroundScheduler] = None):
        self.app = app
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self.schedule: Optional[ReminderSchedule] = None

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self, paused: bool = False) -> None:
        if not self._scheduler.running:
            self._scheduler.start(paused=paused)
            logger.info("Tracker scheduler started")

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Tracker scheduler stopped")

    def reschedule(self, schedule: ReminderSchedule) -> Optional[datetime]:
        """
        Replace the reminder job to match ``schedule``.

        Returns:
            The next fire time, or None when paused
        """
        if self._scheduler.get_job(self.JOB_ID):
            self._scheduler.remove_job(self.JOB_ID)
        self.schedule = schedule

        if not schedule.is_active:
            logger.info("Tracker reminders paused; no job scheduled")
            return None

        self._scheduler.add_job(
            self._run,
            trigger=build_trigger(schedule),
            id=self.JOB_ID,
            name="Daily work tracker reminders",
            replace_existing=True,
            coalesce=True,
            misfire_grace_time=600,
        )
        next_fire = compute_next_fire_time(schedule, datetime.now(timezone.utc))
        logger.info(
            f"Tracker reminders armed for {schedule.time} {schedule.timezone} "
            f"on {','.join(schedule.days)}; next at {next_fire.isoformat() if next_fire else None}"
        )
        return next_fire

    def has_job(self) -> bool:
        return self._scheduler.get_job(self.JOB_ID) is not None

    def _run(self) -> None:
        from intake.services.tracker_service import TrackerService

        with self.app.app_context():
            result = TrackerService.send_reminders()
            logger.info(
                f"Scheduled tracker reminders: {result['successful']}/{result['total']} sent"
            )
