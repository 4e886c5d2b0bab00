"""
Booking notification dispatch
Sends the confirmation email and the calendar invite after a reservation.
Runs as a background task once the response has gone out; failures are
logged and never reach the caller.
"""

import logging
from datetime import datetime

from .calendar_invite import build_ics

logger = logging.getLogger(__name__)

EVENT_NAME = "TalkTix Session"


def dispatch_booking_notifications(
    email_service,
    recipient_email: str,
    recipient_name: str,
    booking_id: str,
    start_time: datetime,
    end_time: datetime,
) -> dict:
    """
    Send confirmation, then calendar invite

    Args:
        email_service: EmailService (or anything with the same send methods)
        recipient_email: Where both emails go
        recipient_name: Greeting name
        booking_id: Slot ID (also the invite UID)
        start_time: Slot start (UTC)
        end_time: Slot end (UTC)

    Returns:
        Dict with confirmation_sent and invite_sent status
    """
    result = {"confirmation_sent": False, "invite_sent": False}

    try:
        logger.info(f"📧 Sending booking confirmation for {booking_id} to {recipient_email}")
        email_service.send_booking_confirmation(
            to=recipient_email,
            recipient_name=recipient_name,
            booking_id=booking_id,
            start_time=start_time,
            end_time=end_time,
        )
        result["confirmation_sent"] = True
    except Exception as e:
        logger.error(f"❌ Failed to send booking confirmation to {recipient_email}: {e}")

    try:
        logger.info(f"📧 Sending calendar invite for {booking_id} to {recipient_email}")
        ics_content = build_ics(
            booking_id=booking_id,
            event_name=EVENT_NAME,
            start_time=start_time,
            end_time=end_time,
            description=f"Booking {booking_id}",
        )
        email_service.send_calendar_invite(
            to=recipient_email,
            recipient_name=recipient_name,
            event_name=EVENT_NAME,
            start_time=start_time,
            end_time=end_time,
            ics_content=ics_content,
        )
        result["invite_sent"] = True
    except Exception as e:
        logger.error(f"❌ Failed to send calendar invite to {recipient_email}: {e}")

    if result["confirmation_sent"] and result["invite_sent"]:
        logger.info(f"✅ Booking notifications sent for {booking_id}")
    return result
