"""Speaker router - FastAPI endpoints for speaker accounts"""

import asyncio
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import ROLE_SPEAKER, Principal, ensure_self, get_current_principal
from ...cache import BOOKINGS_ALL_KEY, Cache, booking_key, get_cache
from ...database import get_db
from ...email_service import EmailService, get_email_service
from ...models import Speaker
from ...services.otp_service import OTPService, get_otp_service
from ...utils.timezone_utils import as_utc
from ..users.schemas import MessageResponse, OTPVerify
from .schemas import (
    SpeakerAuthResponse,
    SpeakerLogin,
    SpeakerResponse,
    SpeakerSignup,
    SpeakerUpdate,
)
from .service import SpeakerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/speaker", tags=["Speakers"])


def get_speaker_service(
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
    email_service: EmailService = Depends(get_email_service),
) -> SpeakerService:
    """Dependency injection for SpeakerService"""
    return SpeakerService(db, otp_service, email_service)


def to_speaker_response(speaker: Speaker) -> SpeakerResponse:
    return SpeakerResponse(
        id=speaker.id,
        firstName=speaker.first_name,
        lastName=speaker.last_name,
        email=speaker.email,
        isVerified=speaker.is_verified,
        pricePerSession=f"{speaker.price_per_session:.2f}",
        bio=speaker.bio,
        createdAt=as_utc(speaker.created_at),
    )


# ============================================================================
# PUBLIC DIRECTORY
# ============================================================================


@router.get("", response_model=list[SpeakerResponse])
async def list_speakers(service: SpeakerService = Depends(get_speaker_service)):
    """Get all speakers"""
    return [to_speaker_response(s) for s in service.list_speakers()]


@router.get("/{speaker_id}", response_model=SpeakerResponse)
async def get_speaker(speaker_id: str, service: SpeakerService = Depends(get_speaker_service)):
    return to_speaker_response(service.get_speaker(speaker_id))


# ============================================================================
# AUTHENTICATION
# ============================================================================


@router.post("/signup", response_model=SpeakerAuthResponse, status_code=201)
async def signup(data: SpeakerSignup, service: SpeakerService = Depends(get_speaker_service)):
    """Register a new speaker"""
    speaker, token = service.signup(data)
    return SpeakerAuthResponse(speaker=to_speaker_response(speaker), token=token)


@router.post("/login", response_model=SpeakerAuthResponse)
async def login(data: SpeakerLogin, service: SpeakerService = Depends(get_speaker_service)):
    speaker, token = service.login(data.email, data.password)
    return SpeakerAuthResponse(speaker=to_speaker_response(speaker), token=token)


# ============================================================================
# EMAIL VERIFICATION
# ============================================================================


@router.post("/send-otp/{speaker_id}", response_model=MessageResponse)
async def send_otp(
    speaker_id: str,
    principal: Principal = Depends(get_current_principal),
    service: SpeakerService = Depends(get_speaker_service),
):
    """Email a verification code to the caller"""
    ensure_self(principal, speaker_id, ROLE_SPEAKER)
    await asyncio.to_thread(service.send_otp, speaker_id)
    return MessageResponse(message="OTP sent successfully")


@router.post("/verify/{speaker_id}", response_model=SpeakerResponse)
async def verify(
    speaker_id: str,
    data: OTPVerify,
    principal: Principal = Depends(get_current_principal),
    service: SpeakerService = Depends(get_speaker_service),
):
    """Confirm the emailed code and mark the account verified"""
    ensure_self(principal, speaker_id, ROLE_SPEAKER)
    return to_speaker_response(service.verify(speaker_id, data.otp))


# ============================================================================
# PROFILE
# ============================================================================


@router.put("/update/{speaker_id}", response_model=SpeakerResponse)
async def update_speaker(
    speaker_id: str,
    data: SpeakerUpdate,
    principal: Principal = Depends(get_current_principal),
    service: SpeakerService = Depends(get_speaker_service),
):
    ensure_self(principal, speaker_id, ROLE_SPEAKER)
    return to_speaker_response(service.update_speaker(speaker_id, data))


@router.delete("/delete/{speaker_id}", response_model=MessageResponse)
async def delete_speaker(
    speaker_id: str,
    principal: Principal = Depends(get_current_principal),
    service: SpeakerService = Depends(get_speaker_service),
    cache: Cache = Depends(get_cache),
):
    """Delete the caller's account and every slot they own"""
    ensure_self(principal, speaker_id, ROLE_SPEAKER)
    booking_ids = service.delete_speaker(speaker_id)
    cache.delete(BOOKINGS_ALL_KEY, *(booking_key(b) for b in booking_ids))
    return MessageResponse(message="Speaker deleted successfully")
