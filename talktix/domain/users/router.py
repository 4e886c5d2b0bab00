"""User router - FastAPI endpoints for user accounts"""

import asyncio
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import ROLE_USER, Principal, ensure_self, get_current_principal
from ...database import get_db
from ...email_service import EmailService, get_email_service
from ...models import User
from ...services.otp_service import OTPService, get_otp_service
from ...utils.timezone_utils import as_utc
from .schemas import (
    MessageResponse,
    OTPVerify,
    UserAuthResponse,
    UserLogin,
    UserResponse,
    UserSignup,
    UserUpdate,
)
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"])


def get_user_service(
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
    email_service: EmailService = Depends(get_email_service),
) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db, otp_service, email_service)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        firstName=user.first_name,
        lastName=user.last_name,
        email=user.email,
        isVerified=user.is_verified,
        createdAt=as_utc(user.created_at),
    )


# ============================================================================
# AUTHENTICATION
# ============================================================================


@router.post("/signup", response_model=UserAuthResponse, status_code=201)
async def signup(data: UserSignup, service: UserService = Depends(get_user_service)):
    """Register a new user"""
    user, token = service.signup(data)
    return UserAuthResponse(user=to_user_response(user), token=token)


@router.post("/login", response_model=UserAuthResponse)
async def login(data: UserLogin, service: UserService = Depends(get_user_service)):
    user, token = service.login(data.email, data.password)
    return UserAuthResponse(user=to_user_response(user), token=token)


# ============================================================================
# PROFILE
# ============================================================================


@router.get("", response_model=list[UserResponse])
async def list_users(
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    """Get all users"""
    return [to_user_response(u) for u in service.list_users()]


@router.get("/user/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    """Get the caller's own profile"""
    ensure_self(principal, user_id, ROLE_USER)
    return to_user_response(service.get_user(user_id))


@router.put("/update/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    ensure_self(principal, user_id, ROLE_USER)
    return to_user_response(service.update_user(user_id, data))


# ============================================================================
# EMAIL VERIFICATION
# ============================================================================


@router.post("/send-otp/{user_id}", response_model=MessageResponse)
async def send_otp(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    """Email a verification code to the caller"""
    ensure_self(principal, user_id, ROLE_USER)
    await asyncio.to_thread(service.send_otp, user_id)
    return MessageResponse(message="OTP sent successfully")


@router.post("/verify/{user_id}", response_model=UserResponse)
async def verify(
    user_id: str,
    data: OTPVerify,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
):
    """Confirm the emailed code and mark the account verified"""
    ensure_self(principal, user_id, ROLE_USER)
    return to_user_response(service.verify(user_id, data.otp))
