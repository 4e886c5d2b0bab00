"""Booking routers - FastAPI endpoints for slots and reservations"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal, get_current_speaker, get_current_user
from ...cache import BOOKINGS_ALL_KEY, Cache, booking_key, get_cache, invalidate_booking_cache
from ...database import get_db
from ...email_service import EmailService, get_email_service
from ...models import Booking, Speaker, User
from ...services.notification_service import dispatch_booking_notifications
from ...utils.timezone_utils import as_utc
from .schemas import (
    BookingCreate,
    BookingDeletedResponse,
    BookingEnvelope,
    BookingListResponse,
    BookingReference,
    BookingResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
speaker_booking_router = APIRouter(prefix="/speaker-booking", tags=["Speaker Bookings"])
user_booking_router = APIRouter(prefix="/user-booking", tags=["User Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def to_booking_response(booking: Booking) -> BookingResponse:
    reservation = booking.speaker_reservation
    return BookingResponse(
        id=booking.id,
        sessionStartTime=as_utc(booking.session_start_time),
        sessionEndTime=as_utc(booking.session_end_time),
        speakerId=reservation.speaker_id if reservation else None,
        createdAt=as_utc(booking.created_at),
    )


def _schedule_notifications(
    background_tasks: BackgroundTasks,
    email_service: EmailService,
    recipient: Speaker | User,
    booking: Booking,
) -> None:
    background_tasks.add_task(
        dispatch_booking_notifications,
        email_service,
        recipient.email,
        recipient.first_name,
        booking.id,
        booking.session_start_time,
        booking.session_end_time,
    )


def _create_speaker_slot(
    data: BookingCreate,
    speaker: Speaker,
    service: BookingService,
    cache: Cache,
    background_tasks: BackgroundTasks,
    email_service: EmailService,
) -> BookingEnvelope:
    booking = service.reserve_speaker_slot(speaker, data.sessionStartTime, data.sessionEndTime)
    invalidate_booking_cache(cache, booking.id)
    _schedule_notifications(background_tasks, email_service, speaker, booking)
    return BookingEnvelope(booking=to_booking_response(booking))


# ============================================================================
# PUBLIC SLOT LISTING
# ============================================================================


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
):
    """Get all slots (served from cache when warm)"""
    cached = cache.get(BOOKINGS_ALL_KEY)
    if cached is not None:
        return cached

    response = BookingListResponse(
        bookings=[to_booking_response(b) for b in service.list_bookings()]
    )
    cache.set(BOOKINGS_ALL_KEY, response.model_dump(mode="json"))
    return response


@router.get("/{booking_id}", response_model=BookingEnvelope)
async def get_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
):
    """Get a single slot"""
    key = booking_key(booking_id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    response = BookingEnvelope(booking=to_booking_response(service.get_booking(booking_id)))
    cache.set(key, response.model_dump(mode="json"))
    return response


@router.post("/create", response_model=BookingEnvelope, status_code=201)
async def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    speaker: Speaker = Depends(get_current_speaker),
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
    email_service: EmailService = Depends(get_email_service),
):
    """Reserve a one-hour slot as the calling speaker"""
    return _create_speaker_slot(data, speaker, service, cache, background_tasks, email_service)


@router.post("/cancel/{booking_id}", response_model=BookingDeletedResponse)
async def cancel_booking(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
):
    """Cancel a slot the caller holds a reservation on"""
    service.cancel_booking(principal, booking_id)
    invalidate_booking_cache(cache, booking_id)
    return BookingDeletedResponse(message="Booking cancelled successfully", bookingId=booking_id)


# ============================================================================
# SPEAKER RESERVATIONS
# ============================================================================


@speaker_booking_router.get("/bookings", response_model=BookingListResponse)
async def get_speaker_bookings(
    speaker: Speaker = Depends(get_current_speaker),
    service: BookingService = Depends(get_booking_service),
):
    """Get the calling speaker's slots"""
    bookings = service.get_speaker_bookings(speaker.id)
    return BookingListResponse(bookings=[to_booking_response(b) for b in bookings])


@speaker_booking_router.post("/book", response_model=BookingEnvelope, status_code=201)
async def speaker_book(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    speaker: Speaker = Depends(get_current_speaker),
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
    email_service: EmailService = Depends(get_email_service),
):
    """Reserve a one-hour slot as the calling speaker"""
    return _create_speaker_slot(data, speaker, service, cache, background_tasks, email_service)


@speaker_booking_router.post("/delete", response_model=BookingDeletedResponse)
async def speaker_delete_booking(
    data: BookingReference,
    speaker: Speaker = Depends(get_current_speaker),
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
):
    """Withdraw one of the caller's slots (removes every reservation on it)"""
    service.cancel_speaker_slot(speaker.id, data.bookingId)
    invalidate_booking_cache(cache, data.bookingId)
    return BookingDeletedResponse(message="Booking deleted successfully", bookingId=data.bookingId)


# ============================================================================
# USER RESERVATIONS
# ============================================================================


@user_booking_router.get("/bookings", response_model=BookingListResponse)
async def get_user_bookings(
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Get the slots the calling user has booked"""
    bookings = service.get_user_bookings(user.id)
    return BookingListResponse(bookings=[to_booking_response(b) for b in bookings])


@user_booking_router.post("/book", response_model=BookingEnvelope, status_code=201)
async def user_book(
    data: BookingReference,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
    email_service: EmailService = Depends(get_email_service),
):
    """Book a seat on an existing slot"""
    booking = service.reserve_user_slot(user, data.bookingId)
    invalidate_booking_cache(cache, booking.id)
    _schedule_notifications(background_tasks, email_service, user, booking)
    return BookingEnvelope(booking=to_booking_response(booking))


@user_booking_router.post("/delete", response_model=BookingDeletedResponse)
async def user_delete_booking(
    data: BookingReference,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
    cache: Cache = Depends(get_cache),
):
    """Drop the caller's reservation (the slot stays)"""
    service.cancel_user_reservation(user.id, data.bookingId)
    invalidate_booking_cache(cache, data.bookingId)
    return BookingDeletedResponse(message="Booking deleted successfully", bookingId=data.bookingId)
