"""Booking repository - Database operations for slots and reservations

Writes here only stage changes on the session; BookingService owns the
commit so a slot and its reservation rows land (or roll back) together.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Booking, BookingSpeaker, BookingUser


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def list_bookings(db: Session) -> list[Booking]:
        """Get all slots, earliest first"""
        return (
            db.query(Booking)
            .options(joinedload(Booking.speaker_reservation))
            .order_by(Booking.session_start_time.asc())
            .all()
        )

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.speaker_reservation))
            .filter(Booking.id == booking_id)
            .first()
        )

    @staticmethod
    def get_booking_by_start(db: Session, start: datetime) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.session_start_time == start).first()

    @staticmethod
    def find_overlapping(db: Session, start: datetime, end: datetime) -> list[Booking]:
        """Slots sharing any part of [start, end)"""
        return (
            db.query(Booking)
            .filter(Booking.session_start_time < end, Booking.session_end_time > start)
            .order_by(Booking.session_start_time.asc())
            .all()
        )

    @staticmethod
    def get_speaker_bookings(db: Session, speaker_id: str) -> list[Booking]:
        return (
            db.query(Booking)
            .join(BookingSpeaker, BookingSpeaker.booking_id == Booking.id)
            .options(joinedload(Booking.speaker_reservation))
            .filter(BookingSpeaker.speaker_id == speaker_id)
            .order_by(Booking.session_start_time.asc())
            .all()
        )

    @staticmethod
    def get_user_bookings(db: Session, user_id: str) -> list[Booking]:
        return (
            db.query(Booking)
            .join(BookingUser, BookingUser.booking_id == Booking.id)
            .options(joinedload(Booking.speaker_reservation))
            .filter(BookingUser.user_id == user_id)
            .order_by(Booking.session_start_time.asc())
            .all()
        )

    @staticmethod
    def get_speaker_reservation(
        db: Session, booking_id: str, speaker_id: str
    ) -> Optional[BookingSpeaker]:
        return (
            db.query(BookingSpeaker)
            .filter(BookingSpeaker.booking_id == booking_id, BookingSpeaker.speaker_id == speaker_id)
            .first()
        )

    @staticmethod
    def get_user_reservation(db: Session, booking_id: str, user_id: str) -> Optional[BookingUser]:
        return (
            db.query(BookingUser)
            .filter(BookingUser.booking_id == booking_id, BookingUser.user_id == user_id)
            .first()
        )

    @staticmethod
    def add_booking(db: Session, start: datetime, end: datetime) -> Booking:
        """Stage a new slot and flush so its ID is assigned"""
        booking = Booking(session_start_time=start, session_end_time=end)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def add_speaker_reservation(db: Session, booking_id: str, speaker_id: str) -> BookingSpeaker:
        reservation = BookingSpeaker(booking_id=booking_id, speaker_id=speaker_id)
        db.add(reservation)
        db.flush()
        return reservation

    @staticmethod
    def add_user_reservation(db: Session, booking_id: str, user_id: str) -> BookingUser:
        reservation = BookingUser(booking_id=booking_id, user_id=user_id)
        db.add(reservation)
        db.flush()
        return reservation

    @staticmethod
    def delete_user_reservation(db: Session, reservation: BookingUser) -> None:
        db.delete(reservation)
        db.flush()

    @staticmethod
    def delete_booking(db: Session, booking_id: str) -> None:
        """Remove a slot: user rows, then the speaker row, then the slot itself"""
        db.query(BookingUser).filter(BookingUser.booking_id == booking_id).delete(
            synchronize_session=False
        )
        db.query(BookingSpeaker).filter(BookingSpeaker.booking_id == booking_id).delete(
            synchronize_session=False
        )
        db.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
        db.flush()

    @staticmethod
    def get_speaker_booking_ids(db: Session, speaker_id: str) -> list[str]:
        rows = db.query(BookingSpeaker.booking_id).filter(BookingSpeaker.speaker_id == speaker_id).all()
        return [row[0] for row in rows]

