"""Booking rules - pure checks on a requested speaker window"""

from datetime import datetime, timedelta

from ...errors import ValidationError
from ...utils.timezone_utils import to_utc_naive

SLOT_LENGTH = timedelta(hours=1)
FIRST_START_HOUR = 9
LAST_END_HOUR = 16


def business_day(day: datetime) -> tuple[datetime, datetime]:
    """Opening and closing time (naive UTC) on the date of `day`"""
    midnight = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return (
        midnight + timedelta(hours=FIRST_START_HOUR),
        midnight + timedelta(hours=LAST_END_HOUR),
    )


def window_violations(start: datetime, end: datetime) -> list[str]:
    """Every rule the window breaks, in rule order (empty when valid)"""
    violations = []
    if end - start != SLOT_LENGTH:
        violations.append("Session must last exactly one hour")
    # Both ends must fall inside the start date's business day
    opening, closing = business_day(start)
    if start < opening or end > closing:
        violations.append(
            f"Session must run between {FIRST_START_HOUR:02d}:00 and {LAST_END_HOUR:02d}:00 UTC"
        )
    if start.minute != 0 or end.minute != 0:
        violations.append("Session must start and end on the hour")
    return violations


def validate_speaker_window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """
    Normalize and check a speaker's requested slot

    Returns:
        (start, end) as naive UTC

    Raises:
        ValidationError: listing every violated rule
    """
    start = to_utc_naive(start)
    end = to_utc_naive(end)
    violations = window_violations(start, end)
    if violations:
        raise ValidationError(
            "Invalid booking window: " + "; ".join(violations),
            details={"violations": violations},
        )
    return start, end
