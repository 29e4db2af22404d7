"""
Email Service
Sends invitation and reminder emails over SMTP
"""
import html
import logging
import smtplib
import time
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Dict, Optional

from config.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Outcome of one email send."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        return {"success": self.success, "messageId": self.message_id, "error": self.error}


class EmailService:
    """Service for sending emails via SMTP"""

    RETRY_DELAY_SECONDS = 2

    @staticmethod
    def _get_smtp_config() -> Optional[Dict]:
        if not settings.smtp_enabled:
            return None
        return {
            'host': settings.smtp_host,
            'port': settings.smtp_port,
            'username': settings.smtp_username,
            'password': settings.smtp_password,
            'from_email': settings.smtp_from_email,
            'from_name': settings.smtp_from_name,
            'use_tls': settings.smtp_use_tls,
        }

    @staticmethod
    def _send_email(to: str, subject: str, body_html: str, body_text: Optional[str] = None) -> DispatchResult:
        """
        Send email via SMTP with retry logic.

        Args:
            to: Recipient email address
            subject: Email subject
            body_html: HTML body content
            body_text: Optional plain text body (fallback)

        Returns:
            DispatchResult; ``success`` is False when SMTP is disabled or
            every attempt failed
        """
        smtp_config = EmailService._get_smtp_config()
        if not smtp_config:
            logger.error(f"Cannot send email to {to} - SMTP is not configured")
            return DispatchResult(success=False, error="Email delivery is not configured")

        max_retries = max(1, settings.smtp_max_retries)
        last_error = None

        for attempt in range(1, max_retries + 1):
            message = MIMEMultipart('alternative')
            message['From'] = formataddr((smtp_config['from_name'], smtp_config['from_email']))
            message['To'] = to
            message['Subject'] = subject
            message_id = make_msgid()
            message['Message-ID'] = message_id

            if body_text:
                message.attach(MIMEText(body_text, 'plain'))
            message.attach(MIMEText(body_html, 'html'))

            try:
                if smtp_config['use_tls']:
                    server = smtplib.SMTP(smtp_config['host'], smtp_config['port'], timeout=30)
                    server.starttls()
                else:
                    server = smtplib.SMTP_SSL(smtp_config['host'], smtp_config['port'], timeout=30)

                with server:
                    if smtp_config['username']:
                        server.login(smtp_config['username'], smtp_config['password'])
                    server.send_message(message)

                logger.info(f"Email sent successfully to {to} (attempt {attempt})")
                return DispatchResult(success=True, message_id=message_id)

            except (smtplib.SMTPException, OSError) as e:
                last_error = str(e)
                logger.error(f"Email send error (attempt {attempt}/{max_retries}): {e}")
                if attempt < max_retries:
                    time.sleep(EmailService.RETRY_DELAY_SECONDS * attempt)

        logger.error(f"Failed to send email to {to} after {max_retries} attempts")
        return DispatchResult(success=False, error=last_error or "Email delivery failed")

    @staticmethod
    def send_primary_invitation(to_email: str, admin_name: Optional[str], invitation_link: str, expires_on: str) -> DispatchResult:
        """
        Send the primary invitation email with the form link.

        Args:
            to_email: Recipient
            admin_name: Name of the inviting admin, shown as the sender
            invitation_link: Full URL containing the invitation token
            expires_on: Human readable expiry date

        Returns:
            DispatchResult
        """
        inviter = admin_name or settings.smtp_from_name
        subject = "Action required: complete your patent filing details"

        body_html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2 style="color: #1e3a8a;">Hello,</h2>

            <p>{html.escape(inviter)} has invited you to share the company, applicant and inventor
               details needed to start your patent filing.</p>

            <p style="margin: 30px 0;">
                <a href="{invitation_link}"
                   style="background-color: #1e3a8a; color: white; padding: 12px 24px;
                          text-decoration: none; border-radius: 5px; display: inline-block;">
                    Open the form
                </a>
            </p>

            <p>You can save a draft and come back later. Please keep your GST certificate
               and entity registration certificate ready to upload.</p>

            <p><strong>This link expires on {expires_on}.</strong></p>

            <p style="color: #666; font-size: 12px;">
                If the button does not work, copy this link into your browser:<br>
                {invitation_link}
            </p>
        </body>
        </html>
        """

        body_text = f"""
Hello,

{inviter} has invited you to share the details needed to start your patent filing.

Open the form: {invitation_link}

This link expires on {expires_on}.
        """

        return EmailService._send_email(to_email, subject, body_html, body_text)

    @staticmethod
    def send_tracker_reminder(to_email: str, employee_name: str, tracker_link: str, subject: str) -> DispatchResult:
        """Send the daily work tracker reminder."""
        body_html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <p>Hi {html.escape(employee_name)},</p>
            <p>Please log today's work in the tracker before you sign off.</p>
            <p style="margin: 24px 0;">
                <a href="{tracker_link}"
                   style="background-color: #0f766e; color: white; padding: 10px 20px;
                          text-decoration: none; border-radius: 5px; display: inline-block;">
                    Update work tracker
                </a>
            </p>
            <p style="color: #666; font-size: 12px;">{tracker_link}</p>
        </body>
        </html>
        """
        body_text = f"Hi {employee_name},\n\nPlease log today's work: {tracker_link}\n"

        return EmailService._send_email(to_email, subject, body_html, body_text)
