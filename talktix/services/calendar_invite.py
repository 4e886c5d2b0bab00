"""
iCalendar (.ics) builder for booking invites
One VEVENT per file, sent as a METHOD:REQUEST invitation
"""

from datetime import datetime, timezone
from typing import Optional

PRODID = "-//TalkTix//Booking Invite//EN"
UID_DOMAIN = "talktix.com"
REMINDER_TRIGGER = "-PT30M"


def format_ics_datetime(value: datetime) -> str:
    """UTC basic format, e.g. 20250110T090000Z (naive values are taken as UTC)"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y%m%dT%H%M%SZ")


def escape_ics_text(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def build_ics(
    booking_id: str,
    event_name: str,
    start_time: datetime,
    end_time: datetime,
    description: Optional[str] = None,
    stamp: Optional[datetime] = None,
) -> str:
    """Render the invite; lines are CRLF-terminated"""
    dtstamp = stamp or datetime.now(timezone.utc)
    summary = escape_ics_text(event_name)

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:REQUEST",
        "BEGIN:VEVENT",
        f"UID:{booking_id}@{UID_DOMAIN}",
        f"DTSTAMP:{format_ics_datetime(dtstamp)}",
        f"DTSTART:{format_ics_datetime(start_time)}",
        f"DTEND:{format_ics_datetime(end_time)}",
        f"SUMMARY:{summary}",
    ]
    if description:
        lines.append(f"DESCRIPTION:{escape_ics_text(description)}")
    lines += [
        "STATUS:CONFIRMED",
        "BEGIN:VALARM",
        f"TRIGGER:{REMINDER_TRIGGER}",
        "ACTION:DISPLAY",
        f"DESCRIPTION:Reminder: {summary}",
        "END:VALARM",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"
