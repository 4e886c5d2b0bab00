"""
Timezone utilities

Datetimes are stored naive and always mean UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def to_utc_naive(value: datetime) -> datetime:
    """Aware values are converted to UTC; naive values are already UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Tag a stored naive-UTC value so it serializes with an offset"""
    return value.replace(tzinfo=timezone.utc) if value else value
