"""
Unit tests for the email dispatcher and file storage
"""
import smtplib
import pytest
from unittest.mock import MagicMock, patch

from config.settings import settings
from intake.services.email_service import EmailService
from intake.services.file_storage import FileStorageService, StorageError


@pytest.mark.unit
class TestEmailService:
    """Tests for SMTP dispatch"""

    def test_disabled_smtp_is_a_failure(self):
        with patch.object(settings, "smtp_enabled", False):
            result = EmailService.send_primary_invitation(
                "client@example.com", "Asha", "http://localhost:5173/primary-invitation/t", "November 15, 2026"
            )
        assert result.success is False
        assert result.error == "Email delivery is not configured"

    def test_sends_with_message_id(self):
        smtp = MagicMock()
        smtp.__enter__.return_value = smtp
        with patch.object(settings, "smtp_enabled", True), \
                patch("intake.services.email_service.smtplib.SMTP", return_value=smtp):
            result = EmailService.send_tracker_reminder(
                "meera@example.com", "Meera", "http://localhost:5173/tracker/t", "Daily Work Tracker Reminder"
            )

        assert result.success is True
        assert result.message_id
        sent = smtp.send_message.call_args.args[0]
        assert sent["To"] == "meera@example.com"
        assert sent["Subject"] == "Daily Work Tracker Reminder"

    def test_names_are_escaped_in_html(self):
        smtp = MagicMock()
        smtp.__enter__.return_value = smtp
        with patch.object(settings, "smtp_enabled", True), \
                patch("intake.services.email_service.smtplib.SMTP", return_value=smtp):
            EmailService.send_primary_invitation("client@example.com", "<b>Asha</b>", "http://x/t", "soon")
            EmailService.send_tracker_reminder("meera@example.com", "Meera <script>", "http://x/t", "Reminder")

        invitation, reminder = [call.args[0] for call in smtp.send_message.call_args_list]

        def html_part(message):
            part = [p for p in message.get_payload() if p.get_content_type() == "text/html"][0]
            return part.get_payload(decode=True).decode()

        assert "&lt;b&gt;Asha&lt;/b&gt; has invited" in html_part(invitation)
        assert "<b>Asha</b>" not in html_part(invitation)
        assert "Hi Meera &lt;script&gt;," in html_part(reminder)

    def test_retries_then_fails(self):
        with patch.object(settings, "smtp_enabled", True), \
                patch.object(settings, "smtp_max_retries", 3), \
                patch("intake.services.email_service.time.sleep") as sleep, \
                patch("intake.services.email_service.smtplib.SMTP",
                      side_effect=smtplib.SMTPConnectError(421, "busy")) as smtp_cls:
            result = EmailService.send_primary_invitation("client@example.com", None, "http://x/t", "soon")

        assert result.success is False
        assert smtp_cls.call_count == 3
        assert sleep.call_count == 2


@pytest.mark.unit
class TestLocalFileStorage:
    """Tests for the local storage backend"""

    @pytest.fixture
    def storage(self, tmp_path):
        with patch.object(settings, "storage_backend", "local"), \
                patch.object(settings, "storage_local_path", str(tmp_path)):
            yield FileStorageService()

    def test_upload_writes_file(self, storage, tmp_path):
        stored = storage.upload(b"%PDF-1.4", folder="primary-invitations/client@example.com", filename="GST Cert.PDF")

        assert stored["format"] == "pdf"
        assert stored["bytes"] == 8
        assert stored["original_filename"] == "GST Cert.PDF"
        assert stored["public_id"].startswith("primary-invitations/client@example.com/GST_Cert_")
        assert stored["secure_url"].endswith(stored["public_id"])
        assert (tmp_path / stored["public_id"]).read_bytes() == b"%PDF-1.4"

    def test_rejects_disallowed_type(self, storage):
        with pytest.raises(StorageError, match="not allowed"):
            storage.upload(b"MZ", folder="x", filename="tool.exe")

    def test_rejects_empty_file(self, storage):
        with pytest.raises(StorageError, match="empty"):
            storage.upload(b"", folder="x", filename="gst.pdf")

    def test_rejects_oversized_file(self, storage):
        storage.max_size_bytes = 4
        with pytest.raises(StorageError, match="too large"):
            storage.upload(b"12345", folder="x", filename="gst.pdf")

    def test_delete(self, storage):
        stored = storage.upload(b"%PDF", folder="x", filename="gst.pdf")
        assert storage.delete(stored["public_id"]) is True
        assert storage.delete(stored["public_id"]) is False
