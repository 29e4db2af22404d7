"""Pytest configuration and fixtures."""

import pytest
import sys
import os
from datetime import datetime, timedelta
from unittest.mock import patch

# Add the parent directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from intake import create_app, db as app_db
from config.testing import TestingConfig
from intake.models import AdminUser, Employee, PrimaryInvitation
from intake.models.primary_invitation import empty_applicant_info, empty_company_info
from intake.services.admin_auth_service import AdminAuthService
from intake.services.email_service import DispatchResult


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app(config=TestingConfig)
    return app


@pytest.fixture(scope="function")
def client(app, db):
    """Flask test client sharing the db fixture's application context."""
    with app.test_client() as client:
        yield client


@pytest.fixture(scope="function")
def db(app):
    """Database session for testing."""
    with app.app_context():
        # Create all tables
        app_db.create_all()
        yield app_db
        # Drop all tables
        app_db.session.remove()
        app_db.drop_all()


@pytest.fixture
def mock_email():
    """Invitation emails that always succeed."""
    with patch("intake.services.primary_invitation_service.EmailService") as email_service:
        email_service.send_primary_invitation.return_value = DispatchResult(
            success=True, message_id="<invite@example.com>"
        )
        yield email_service


@pytest.fixture
def failing_email():
    """Invitation emails that always fail."""
    with patch("intake.services.primary_invitation_service.EmailService") as email_service:
        email_service.send_primary_invitation.return_value = DispatchResult(
            success=False, error="SMTP connection refused"
        )
        yield email_service


@pytest.fixture
def mock_storage():
    """File storage returning a fixed descriptor."""
    with patch("intake.services.primary_invitation_service.FileStorageService") as storage_cls:
        storage_cls.return_value.upload.return_value = {
            "public_id": "primary-invitations/client@example.com/gst_20261016_abc123.pdf",
            "url": "https://files.example.com/gst.pdf",
            "secure_url": "https://files.example.com/gst.pdf",
            "original_filename": "gst.pdf",
            "bytes": 11,
            "format": "pdf",
            "created_at": "2026-10-16T10:00:00",
        }
        yield storage_cls.return_value


@pytest.fixture
def sample_admin(db):
    """Create an admin account."""
    return AdminAuthService.create_admin(
        email="admin@example.com",
        password="correct-horse",
        name="Asha Admin",
    )


@pytest.fixture
def auth_headers(sample_admin):
    """Bearer headers for the sample admin."""
    login = AdminAuthService.login("admin@example.com", "correct-horse")
    return {"Authorization": f"Bearer {login['access_token']}"}


def document(name="gst.pdf"):
    return {
        "publicId": f"primary-invitations/{name}",
        "url": f"https://files.example.com/{name}",
        "secureUrl": f"https://files.example.com/{name}",
        "originalFilename": name,
        "bytes": 1024,
        "format": "pdf",
        "uploadedAt": "2026-10-01T09:00:00",
    }


def complete_company_info(**overrides):
    company_info = {
        "name": "Acme Innovations",
        "address": "12 MG Road, Bengaluru",
        "pinCode": "560001",
        "gstNumber": "29AAACA1234A1Z5",
        "gstCertificate": document("gst.pdf"),
        "entityType": "Pvt Ltd",
        "entityCertificate": document("coi.pdf"),
    }
    company_info.update(overrides)
    return company_info


def inventor(**overrides):
    data = {
        "name": "Ravi Kumar",
        "address": "4 Residency Road, Bengaluru",
        "pinCode": "560025",
        "nationality": "Indian",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_invitation(db):
    """Factory for invitations inserted directly, bypassing email."""
    def _make(email="client@example.com", status="pending", expires_in=timedelta(days=30), **columns):
        now = datetime.utcnow()
        invitation = PrimaryInvitation(
            email=email,
            admin_name="Asha Admin",
            token=PrimaryInvitation.generate_token(),
            status=status,
            expires_at=now + expires_in,
            invited_at=now,
            last_invitation_sent=now,
            company_info=columns.pop("company_info", empty_company_info()),
            applicant_info=columns.pop("applicant_info", empty_applicant_info()),
            inventors=columns.pop("inventors", []),
            comments=columns.pop("comments", ""),
            auto_prefill_enabled=columns.pop("auto_prefill_enabled", False),
            locked_fields=columns.pop("locked_fields", []),
            **columns,
        )
        db.session.add(invitation)
        db.session.commit()
        return invitation

    return _make


@pytest.fixture
def sample_employee(db):
    employee = Employee(
        name="Meera Iyer",
        email="meera@example.com",
        designation="Patent Analyst",
        department="Drafting",
        employee_code="EMP-001",
        status="active",
    )
    db.session.add(employee)
    db.session.commit()
    return employee


@pytest.fixture
def tracker_token(db, sample_employee):
    """A live tracker token for the sample employee."""
    sample_employee.tracker_token = Employee.generate_tracker_token()
    sample_employee.tracker_token_expires_at = datetime.utcnow() + timedelta(hours=48)
    db.session.commit()
    return sample_employee.tracker_token


def effort(**overrides):
    data = {
        "projectName": "Acme sensor",
        "docketNumber": "IN-2026-014",
        "effortType": "Drafting",
        "hours": 5.5,
        "notes": None,
    }
    data.update(overrides)
    return data
