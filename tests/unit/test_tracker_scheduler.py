"""
Unit tests for tracker reminder scheduling
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler

from intake.services.tracker_scheduler import (
    ReminderSchedule,
    TrackerScheduler,
    compute_next_fire_time,
    day_of_week_expression,
    parse_time,
    validate_timezone,
)

IST = ZoneInfo("Asia/Kolkata")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def weekday_schedule(**overrides):
    values = {"status": "active", "time": "18:00", "timezone": "Asia/Kolkata", "days": WEEKDAYS}
    values.update(overrides)
    return ReminderSchedule(**values)


@pytest.mark.unit
class TestScheduleHelpers:
    """Tests for parsing schedule settings"""

    def test_parse_time(self):
        assert parse_time("18:00") == (18, 0)
        assert parse_time("07:45") == (7, 45)

    @pytest.mark.parametrize("value", ["24:00", "18:60", "6pm", "", None])
    def test_parse_time_rejects(self, value):
        with pytest.raises(ValueError):
            parse_time(value)

    def test_day_of_week_expression(self):
        assert day_of_week_expression(["Monday", "friday", "wed"]) == "mon,fri,wed"

    def test_day_of_week_expression_dedupes(self):
        assert day_of_week_expression(["Monday", "mon"]) == "mon"

    def test_day_of_week_expression_rejects(self):
        with pytest.raises(ValueError):
            day_of_week_expression(["Funday"])
        with pytest.raises(ValueError):
            day_of_week_expression([])

    def test_validate_timezone(self):
        assert validate_timezone("Asia/Kolkata") == "Asia/Kolkata"
        with pytest.raises(ValueError):
            validate_timezone("Mars/Olympus_Mons")


@pytest.mark.unit
class TestComputeNextFireTime:
    """Tests for the next reminder time"""

    def test_friday_evening_rolls_to_monday(self):
        # Friday 2026-10-16 19:00 IST
        now = datetime(2026, 10, 16, 13, 30, tzinfo=timezone.utc)
        next_fire = compute_next_fire_time(weekday_schedule(), now)
        assert next_fire == datetime(2026, 10, 19, 18, 0, tzinfo=IST)

    def test_same_day_before_reminder(self):
        now = datetime(2026, 10, 16, 10, 0, tzinfo=IST)
        next_fire = compute_next_fire_time(weekday_schedule(), now)
        assert next_fire == datetime(2026, 10, 16, 18, 0, tzinfo=IST)

    def test_strictly_after_now(self):
        now = datetime(2026, 10, 15, 18, 0, tzinfo=IST)
        next_fire = compute_next_fire_time(weekday_schedule(), now)
        assert next_fire == datetime(2026, 10, 16, 18, 0, tzinfo=IST)

    def test_naive_now_is_utc(self):
        next_fire = compute_next_fire_time(weekday_schedule(), datetime(2026, 10, 16, 13, 30))
        assert next_fire == datetime(2026, 10, 19, 18, 0, tzinfo=IST)

    def test_paused_has_no_next_time(self):
        now = datetime(2026, 10, 16, 10, 0, tzinfo=timezone.utc)
        assert compute_next_fire_time(weekday_schedule(status="paused"), now) is None

    def test_other_timezone(self):
        schedule = weekday_schedule(time="09:00", timezone="America/New_York", days=("Saturday",))
        now = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
        next_fire = compute_next_fire_time(schedule, now)
        assert next_fire == datetime(2026, 10, 17, 9, 0, tzinfo=ZoneInfo("America/New_York"))


@pytest.mark.unit
class TestTrackerScheduler:
    """Tests for arming the reminder job"""

    @pytest.fixture
    def tracker_scheduler(self):
        scheduler = TrackerScheduler(MagicMock(), BackgroundScheduler(timezone="UTC"))
        scheduler.start(paused=True)
        yield scheduler
        scheduler.shutdown()

    def test_reschedule_adds_job(self, tracker_scheduler):
        next_fire = tracker_scheduler.reschedule(weekday_schedule())
        assert tracker_scheduler.has_job()
        assert next_fire is not None
        assert next_fire > datetime.now(timezone.utc)

    def test_reschedule_replaces_job(self, tracker_scheduler):
        tracker_scheduler.reschedule(weekday_schedule())
        tracker_scheduler.reschedule(weekday_schedule(time="09:30"))
        assert tracker_scheduler.has_job()
        assert tracker_scheduler.schedule.time == "09:30"

    def test_pause_removes_job(self, tracker_scheduler):
        tracker_scheduler.reschedule(weekday_schedule())
        assert tracker_scheduler.reschedule(weekday_schedule(status="paused")) is None
        assert not tracker_scheduler.has_job()

    def test_invalid_schedule_raises(self, tracker_scheduler):
        with pytest.raises(ValueError):
            tracker_scheduler.reschedule(weekday_schedule(timezone="Nowhere/City"))
