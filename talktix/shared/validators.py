"""Shared validation utilities"""

import re
from typing import Optional

from ..security_utils import is_strong_password

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PRICE_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 255
BIO_MIN_LENGTH = 10
BIO_MAX_LENGTH = 1000


def validate_name(name: str, field: str = "Name") -> str:
    name = name.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValueError(
            f"{field} must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    return name


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if email is None:
        return email

    email = email.strip().lower()

    if len(email) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def validate_password(password: str) -> str:
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValueError(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters"
        )
    if not is_strong_password(password):
        raise ValueError(
            "Password must contain uppercase, lowercase, number and special character (@$!%*?&)"
        )
    return password


def validate_price(price: str) -> str:
    """Decimal string with at most two fraction digits, e.g. 49.99"""
    price = str(price).strip()
    if not PRICE_PATTERN.match(price):
        raise ValueError("Price must be a number with up to two decimal places")
    return price


def validate_bio(bio: Optional[str]) -> Optional[str]:
    if bio is None:
        return bio
    bio = bio.strip()
    if not BIO_MIN_LENGTH <= len(bio) <= BIO_MAX_LENGTH:
        raise ValueError(f"Bio must be between {BIO_MIN_LENGTH} and {BIO_MAX_LENGTH} characters")
    return bio
