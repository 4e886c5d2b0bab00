"""
Security Utilities
Password hashing and access-token handling
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import JWT_ALGORITHM, JWT_EXPIRES_HOURS, JWT_SECRET_KEY

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification error: {e}")
        return False


def is_strong_password(password: str) -> bool:
    """Uppercase, lowercase, number and special character, 8+ characters"""
    return bool(PASSWORD_PATTERN.match(password))


# ============================================================================
# ACCESS TOKENS
# ============================================================================


def create_access_token(
    identity_id: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed JWT carrying {userId, role}

    Args:
        identity_id: User or speaker ID
        role: "user" or "speaker"
        expires_delta: Token lifetime (default JWT_EXPIRES_HOURS)
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=JWT_EXPIRES_HOURS))
    to_encode = {"userId": identity_id, "role": role, "exp": expire}
    return jose_jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None
