"""
Integration tests for the work tracker API
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import patch

from conftest import effort
from intake.services.email_service import DispatchResult

BASE = "/api/tracker"


@pytest.mark.integration
class TestEmployeesApi:
    """Tests for the employee roster endpoints"""

    def test_create_and_list(self, client, auth_headers):
        response = client.post(
            f"{BASE}/employees",
            json={"name": "Meera Iyer", "email": "meera@example.com", "department": "Drafting"},
            headers=auth_headers,
        )
        assert response.status_code == 201

        response = client.get(f"{BASE}/employees", headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["count"] == 1

    def test_duplicate_email_conflict(self, client, auth_headers, sample_employee):
        response = client.post(
            f"{BASE}/employees",
            json={"name": "Meera Again", "email": "meera@example.com"},
            headers=auth_headers,
        )
        assert response.status_code == 409

    def test_update_and_delete(self, client, auth_headers, sample_employee):
        response = client.patch(
            f"{BASE}/employees/{sample_employee.id}",
            json={"status": "inactive"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.get_json()["employee"]["status"] == "inactive"

        response = client.delete(f"{BASE}/employees/{sample_employee.id}", headers=auth_headers)
        assert response.status_code == 200

        response = client.delete(f"{BASE}/employees/{sample_employee.id}", headers=auth_headers)
        assert response.status_code == 404

    def test_trigger_reminders(self, client, auth_headers, sample_employee):
        with patch("intake.services.tracker_service.EmailService") as email_service:
            email_service.send_tracker_reminder.return_value = DispatchResult(success=True)
            response = client.post(f"{BASE}/trigger", headers=auth_headers)

        assert response.status_code == 200
        assert response.get_json()["successful"] == 1


@pytest.mark.integration
class TestTrackerSettingsApi:
    """Tests for reminder settings endpoints"""

    def test_get_defaults(self, client, auth_headers):
        response = client.get(f"{BASE}/settings", headers=auth_headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data["settings"]["cron_time"] == "18:00"
        assert data["next_run_at"] is not None

    def test_update_settings(self, client, auth_headers):
        response = client.patch(
            f"{BASE}/settings",
            json={"cron_time": "10:30", "timezone": "Europe/London", "days_active": ["Monday"]},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.get_json()
        assert data["settings"]["timezone"] == "Europe/London"
        assert data["settings"]["updated_by"] == "admin@example.com"
        assert "T10:30:00" in data["next_run_at"]

    def test_pause(self, client, auth_headers):
        response = client.patch(f"{BASE}/settings", json={"cron_status": "paused"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["next_run_at"] is None

    @pytest.mark.parametrize("body", [
        {"cron_time": "25:00"},
        {"timezone": "Not/AZone"},
        {"days_active": ["Someday"]},
        {"cron_status": "sometimes"},
    ])
    def test_invalid_settings(self, client, auth_headers, body):
        response = client.patch(f"{BASE}/settings", json=body, headers=auth_headers)
        assert response.status_code == 400


@pytest.mark.integration
class TestTrackerFormApi:
    """Tests for the public tracker form"""

    def test_load_form(self, client, tracker_token):
        response = client.get(f"{BASE}/form/{tracker_token}")
        assert response.status_code == 200
        form = response.get_json()["form"]
        assert form["name"] == "Meera Iyer"
        assert form["existingEntry"] is None

    def test_unknown_token_404(self, client, db):
        response = client.get(f"{BASE}/form/not-a-token")
        assert response.status_code == 404
        assert response.get_json()["message"] == "The tracker link is invalid or has expired."

    def test_expired_token_410(self, client, db, sample_employee, tracker_token):
        sample_employee.tracker_token_expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()

        assert client.get(f"{BASE}/form/{tracker_token}").status_code == 410
        response = client.post(f"{BASE}/form/{tracker_token}", json={"arrivalTime": "09:30", "entries": [effort()]})
        assert response.status_code == 410

    def test_submit_then_resubmit(self, client, tracker_token):
        body = {"arrivalTime": "09:30", "date": "2026-10-15", "entries": [effort(), effort(effortType="Review", hours=1)]}
        response = client.post(f"{BASE}/form/{tracker_token}", json=body)
        assert response.status_code == 200
        data = response.get_json()
        assert data["totalHours"] == 6.5
        assert data["entry"]["weekday"] == "Thursday"

        body["entries"] = [effort(hours=8)]
        response = client.post(f"{BASE}/form/{tracker_token}", json=body)
        assert response.status_code == 200
        assert response.get_json()["entryId"] == data["entryId"]
        assert response.get_json()["totalHours"] == 8

    def test_duplicate_effort_rejected(self, client, tracker_token):
        response = client.post(
            f"{BASE}/form/{tracker_token}",
            json={"arrivalTime": "09:30", "entries": [effort(), effort(hours=1)]},
        )
        assert response.status_code == 400
        assert "Duplicate effort type" in response.get_json()["message"]

    @pytest.mark.parametrize("body", [
        {"entries": [effort()]},
        {"arrivalTime": "09:30", "entries": []},
        {"arrivalTime": "09:30", "entries": [effort(hours=25)]},
        {"arrivalTime": "09:30", "entries": [effort(hours=-1)]},
        {"arrivalTime": "09:30", "entries": [effort(effortType="Coffee")]},
        {"arrivalTime": "09:30", "entries": [effort(projectName="   ")]},
    ])
    def test_invalid_submission(self, client, tracker_token, body):
        response = client.post(f"{BASE}/form/{tracker_token}", json=body)
        assert response.status_code == 400


@pytest.mark.integration
class TestWorkEntriesApi:
    """Tests for the admin work entry listing"""

    def test_requires_admin(self, client):
        assert client.get(f"{BASE}/entries").status_code == 401

    def test_list_entries(self, client, auth_headers, sample_employee, tracker_token):
        for day in ("2026-10-14", "2026-10-15"):
            client.post(
                f"{BASE}/form/{tracker_token}",
                json={"arrivalTime": "09:30", "date": day, "entries": [effort()]},
            )

        response = client.get(f"{BASE}/entries?startDate=2026-10-15", headers=auth_headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data["count"] == 1
        assert data["entries"][0]["entry_date"] == "2026-10-15"
        assert data["entries"][0]["employee"]["email"] == "meera@example.com"

        response = client.get(f"{BASE}/entries?employeeId={sample_employee.id}", headers=auth_headers)
        assert response.get_json()["count"] == 2

    def test_bad_date_filter(self, client, auth_headers):
        response = client.get(f"{BASE}/entries?startDate=yesterday", headers=auth_headers)
        assert response.status_code == 400
