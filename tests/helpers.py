from datetime import datetime

from talktix.security_utils import create_access_token

PASSWORD = "Secret@123"


def auth_headers(identity_id: str, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity_id, role)}"}


def slot(hour: int, day: int = 10) -> tuple[datetime, datetime]:
    """A naive-UTC one-hour window starting at the given hour"""
    return datetime(2030, 1, day, hour, 0), datetime(2030, 1, day, hour + 1, 0)
