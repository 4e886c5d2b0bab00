"""
Email Service using SMTP (primary) or Resend (fallback)
Provides email functionality using MJML templates for responsive design
"""

import logging
import smtplib
import socket
import ssl
from datetime import datetime, timezone
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from fastapi import Request
from mjml import mjml_to_html

from . import config
from .email_templates import (
    booking_confirmation_template,
    calendar_invite_template,
    email_verification_template,
)

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when no transport could deliver the message"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e
    # mjml_to_html returns a dict-like with 'html' and 'errors' keys
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return str(getattr(result, "html", result))


class EmailService:
    """Outbound mail. Built once at startup and injected where needed."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        smtp_use_tls: bool = True,
        smtp_timeout: int = 30,
        sender: str = "TalkTix <noreply@talktix.com>",
        resend_api_key: Optional[str] = None,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls
        self.smtp_timeout = smtp_timeout
        self.sender = sender
        self.resend_api_key = resend_api_key

    @classmethod
    def from_config(cls) -> "EmailService":
        return cls(
            smtp_host=config.SMTP_HOST,
            smtp_port=config.SMTP_PORT,
            smtp_username=config.SMTP_USERNAME,
            smtp_password=config.SMTP_PASSWORD,
            smtp_use_tls=config.SMTP_USE_TLS,
            smtp_timeout=config.SMTP_TIMEOUT,
            sender=config.SENDER_EMAIL,
            resend_api_key=config.RESEND_API_KEY,
        )

    def _send_via_smtp(
        self,
        recipients: list[str],
        subject: str,
        html_content: str,
        attachments: Optional[list[dict]] = None,
    ) -> dict:
        """Send email via the configured SMTP server"""
        msg = MIMEMultipart("mixed")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)

        msg.attach(MIMEText(html_content, "html"))

        for attachment in attachments or []:
            maintype, _, subtype = attachment.get(
                "content_type", "application/octet-stream"
            ).partition("/")
            part = MIMEBase(maintype, subtype)
            part.set_payload(attachment["content"])
            encoders.encode_base64(part)
            part.add_header(
                "Content-Disposition", f'attachment; filename="{attachment["filename"]}"'
            )
            msg.attach(part)

        try:
            if self.smtp_port == 465:
                context = ssl.create_default_context()
                server = smtplib.SMTP_SSL(
                    self.smtp_host, self.smtp_port, context=context, timeout=self.smtp_timeout
                )
            else:
                server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.smtp_timeout)
                if self.smtp_use_tls:
                    context = ssl.create_default_context()
                    server.starttls(context=context)

            try:
                if self.smtp_username:
                    server.login(self.smtp_username, self.smtp_password or "")
                server.sendmail(
                    self.sender.split("<")[-1].rstrip(">"), recipients, msg.as_string()
                )
            finally:
                server.quit()
        except (smtplib.SMTPException, socket.timeout, OSError) as e:
            logger.error(f"❌ SMTP send failed via {self.smtp_host}: {e}")
            raise EmailDeliveryError(f"SMTP failed: {str(e)}") from e

        logger.info(f"✅ SMTP email sent successfully via {self.smtp_host}")
        return {"id": f"smtp-{datetime.now(timezone.utc).timestamp()}", "success": True}

    def _send_via_resend(
        self,
        recipients: list[str],
        subject: str,
        html_content: str,
        attachments: Optional[list[dict]] = None,
    ) -> dict:
        resend.api_key = self.resend_api_key
        email_data = {
            "from": self.sender,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
        if attachments:
            email_data["attachments"] = [
                {"filename": attachment["filename"], "content": list(attachment["content"])}
                for attachment in attachments
            ]

        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            logger.error(f"❌ Email send error to {recipients}: {e}")
            raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response

    def send_email(
        self,
        to: Union[str, list[str]],
        subject: str,
        mjml_content: str,
        attachments: Optional[list[dict]] = None,
    ) -> dict:
        """
        Send an email using SMTP (if configured) or Resend (fallback)

        Args:
            to: Recipient email(s)
            subject: Email subject line
            mjml_content: MJML template content (will be compiled to HTML)
            attachments: Optional list of {"filename", "content", "content_type"}

        Returns:
            Send response dict
        """
        html_content = compile_mjml_to_html(mjml_content)
        recipients = [to] if isinstance(to, str) else to

        if self.smtp_host:
            logger.info(f"📧 Sending email via SMTP: {self.smtp_host}")
            return self._send_via_smtp(recipients, subject, html_content, attachments)

        if self.resend_api_key:
            logger.info(f"📧 Sending email via Resend to: {recipients}")
            return self._send_via_resend(recipients, subject, html_content, attachments)

        logger.error("❌ No email service configured - SMTP_HOST and RESEND_API_KEY missing")
        raise EmailDeliveryError("Email service not configured")

    # ============================================
    # Pre-built emails
    # ============================================

    def send_email_verification_otp(self, to: str, user_name: str, otp: str) -> dict:
        """Send OTP for email verification"""
        return self.send_email(
            to=to,
            subject="Verify Your Email",
            mjml_content=email_verification_template(
                user_name, otp, ttl_minutes=config.OTP_TTL_SECONDS // 60
            ),
        )

    def send_booking_confirmation(
        self,
        to: str,
        recipient_name: str,
        booking_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> dict:
        return self.send_email(
            to=to,
            subject="Booking Confirmation",
            mjml_content=booking_confirmation_template(
                recipient_name, booking_id, start_time, end_time
            ),
        )

    def send_calendar_invite(
        self,
        to: str,
        recipient_name: str,
        event_name: str,
        start_time: datetime,
        end_time: datetime,
        ics_content: str,
    ) -> dict:
        return self.send_email(
            to=to,
            subject=f"Calendar Invite: {event_name}",
            mjml_content=calendar_invite_template(
                recipient_name, event_name, start_time, end_time
            ),
            attachments=[
                {
                    "filename": "event.ics",
                    "content": ics_content.encode("utf-8"),
                    "content_type": "text/calendar; method=REQUEST",
                }
            ],
        )


def get_email_service(request: Request) -> EmailService:
    """Dependency injection for EmailService"""
    return request.app.state.email_service
