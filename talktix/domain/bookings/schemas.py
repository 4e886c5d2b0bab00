"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class BookingCreate(BaseModel):
    """Schema for a speaker reserving a new slot"""

    sessionStartTime: datetime
    sessionEndTime: datetime


class BookingReference(BaseModel):
    """Schema for acting on an existing slot"""

    bookingId: str


class BookingResponse(BaseModel):
    """Schema for slot response"""

    id: str
    sessionStartTime: datetime
    sessionEndTime: datetime
    speakerId: Optional[str] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingEnvelope(BaseModel):
    booking: BookingResponse


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]


class BookingDeletedResponse(BaseModel):
    message: str
    bookingId: str
