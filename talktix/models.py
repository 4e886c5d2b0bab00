from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .utils.ulid_helper import generate_ulid


def utcnow() -> datetime:
    """Naive UTC now; every timestamp column stores naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    reservations = relationship("BookingUser", back_populates="user")


class Speaker(Base):
    __tablename__ = "speakers"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    is_verified = Column(Boolean, default=False, nullable=False)
    price_per_session = Column(Numeric(10, 2), nullable=False)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    reservations = relationship("BookingSpeaker", back_populates="speaker")


class Booking(Base):
    """A reserved one-hour slot. Only created through BookingService."""

    __tablename__ = "bookings"
    __table_args__ = (
        # Write-time guarantee behind the start-time collision rule
        UniqueConstraint("session_start_time", name="uq_bookings_session_start_time"),
    )

    id = Column(String(26), primary_key=True, default=generate_ulid)
    session_start_time = Column(DateTime, nullable=False, index=True)
    session_end_time = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    speaker_reservation = relationship("BookingSpeaker", back_populates="booking", uselist=False)
    user_reservations = relationship("BookingUser", back_populates="booking")


class BookingSpeaker(Base):
    __tablename__ = "booking_speakers"

    booking_id = Column(String(26), ForeignKey("bookings.id"), primary_key=True, unique=True)
    speaker_id = Column(String(26), ForeignKey("speakers.id"), primary_key=True, index=True)

    booking = relationship("Booking", back_populates="speaker_reservation")
    speaker = relationship("Speaker", back_populates="reservations")


class BookingUser(Base):
    __tablename__ = "booking_users"

    booking_id = Column(String(26), ForeignKey("bookings.id"), primary_key=True)
    user_id = Column(String(26), ForeignKey("users.id"), primary_key=True, index=True)

    booking = relationship("Booking", back_populates="user_reservations")
    user = relationship("User", back_populates="reservations")
