import logging
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .errors import AuthError, ForbiddenError
from .models import Speaker, User
from .security_utils import decode_access_token

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_SPEAKER = "speaker"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as carried by the access token"""

    id: str
    role: str


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Principal:
    """Get current caller from the bearer token"""
    if not credentials:
        raise AuthError("Authentication required")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthError("Invalid or expired token")

    identity_id = payload.get("userId")
    role = payload.get("role")
    if not identity_id or role not in (ROLE_USER, ROLE_SPEAKER):
        logger.warning(f"⚠️ Token missing claims. Available claims: {list(payload.keys())}")
        raise AuthError("Invalid token claims")

    return Principal(id=identity_id, role=role)


async def require_speaker(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != ROLE_SPEAKER:
        raise ForbiddenError("Access denied. Speaker role required")
    return principal


async def require_user(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != ROLE_USER:
        raise ForbiddenError("Access denied. User role required")
    return principal


def ensure_self(principal: Principal, identity_id: str, role: str) -> None:
    """Callers may only act on their own account"""
    if principal.role != role or principal.id != identity_id:
        logger.warning(
            f"⚠️ {principal.role} {principal.id} attempted to access {role} {identity_id}"
        )
        raise ForbiddenError("Access denied")


async def get_current_speaker(
    principal: Principal = Depends(require_speaker), db: Session = Depends(get_db)
) -> Speaker:
    """Load the calling speaker; a token for a deleted account is rejected"""
    speaker = db.get(Speaker, principal.id)
    if not speaker:
        raise AuthError("Account not found")
    return speaker


async def get_current_user(
    principal: Principal = Depends(require_user), db: Session = Depends(get_db)
) -> User:
    """Load the calling user; a token for a deleted account is rejected"""
    user = db.get(User, principal.id)
    if not user:
        raise AuthError("Account not found")
    return user
