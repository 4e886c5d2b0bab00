"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from datetime import datetime
from html import escape
from typing import Optional

THEME = {
    "primary": "#6366f1",
    "primary_light": "#e0e7ff",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}

SITE_URL = "https://talktix.com"


def format_slot_time(value: datetime) -> str:
    """e.g. Friday, January 10, 2025 at 09:00 UTC"""
    return value.strftime("%A, %B %d, %Y at %H:%M UTC")


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Thank you for choosing TalkTix!
            </mj-text>
            <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
              You're receiving this because you have an account with TalkTix.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def email_verification_template(user_name: str, otp: str, ttl_minutes: int = 10) -> str:
    """Email verification OTP MJML template"""
    content = f"""
    <mj-text>
      Hi {escape(user_name)},
    </mj-text>

    <mj-text>
      Please use the following verification code to confirm your email address.
      This code will expire in {ttl_minutes} minutes.
    </mj-text>

    <mj-text align="center" font-size="14px" color="{THEME['text_muted']}" text-transform="uppercase" letter-spacing="1px" font-weight="600" padding="24px 0 12px 0">
      Verification Code
    </mj-text>
    <mj-text align="center" font-size="36px" font-weight="700" color="{THEME['text_primary']}" letter-spacing="8px" font-family="'Courier New', monospace" padding="0 0 24px 0">
      {otp}
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      If you didn't create an account, you can safely ignore this email.
    </mj-text>
    """

    return get_base_template(
        title="Verify Your Email Address",
        preview_text=f"Your verification code is {otp}",
        content_sections=content,
    )


def booking_confirmation_template(
    recipient_name: str, booking_id: str, start_time: datetime, end_time: datetime
) -> str:
    """Booking confirmation MJML template"""
    content = f"""
    <mj-text>
      Hi {escape(recipient_name)},
    </mj-text>

    <mj-text>
      Your booking has been confirmed.
    </mj-text>

    <mj-text background-color="{THEME['primary_light']}" padding="16px">
      <strong>Booking ID:</strong> {booking_id}<br/>
      <strong>Starts:</strong> {format_slot_time(start_time)}<br/>
      <strong>Ends:</strong> {format_slot_time(end_time)}
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      A calendar invite for this session is on its way in a separate email.
    </mj-text>
    """

    return get_base_template(
        title="Booking Confirmation",
        preview_text=f"Booking {booking_id} is confirmed",
        content_sections=content,
        cta_url=f"{SITE_URL}/bookings/{booking_id}",
        cta_label="View Booking",
    )


def calendar_invite_template(
    recipient_name: str, event_name: str, start_time: datetime, end_time: datetime
) -> str:
    """Calendar invite MJML template (the .ics travels as an attachment)"""
    content = f"""
    <mj-text>
      Hi {escape(recipient_name)},
    </mj-text>

    <mj-text>
      You have been invited to {escape(event_name)}.
    </mj-text>

    <mj-text padding="0 0 0 20px">
      • Start Time: {format_slot_time(start_time)}<br/>
      • End Time: {format_slot_time(end_time)}
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      Open the attached event.ics to add this session to your calendar.
      You will get a reminder 30 minutes before it starts.
    </mj-text>
    """

    return get_base_template(
        title=f"Calendar Invite: {escape(event_name)}",
        preview_text=f"Add {event_name} to your calendar",
        content_sections=content,
    )
