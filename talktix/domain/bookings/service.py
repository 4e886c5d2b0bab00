"""Booking service - Slot reservation engine"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import ROLE_SPEAKER, ROLE_USER, Principal
from ...config import BOOKING_OVERLAP_CHECK
from ...errors import ConflictError, NotFoundError, from_db_error
from ...models import Booking, Speaker, User
from ...utils.timezone_utils import to_utc_naive
from ...utils.ulid_helper import is_valid_ulid
from .repository import BookingRepository
from .rules import validate_speaker_window

logger = logging.getLogger(__name__)

SLOT_TAKEN = "Slot start time is already taken"


class BookingService:
    """Service layer for slot reservations"""

    def __init__(self, db: Session, overlap_check: bool = BOOKING_OVERLAP_CHECK):
        self.db = db
        self.repo = BookingRepository()
        self.overlap_check = overlap_check

    # ============================================================================
    # READS
    # ============================================================================

    def list_bookings(self) -> list[Booking]:
        return self.repo.list_bookings(self.db)

    def get_booking(self, booking_id: str) -> Booking:
        if not is_valid_ulid(booking_id):
            raise NotFoundError("Booking not found")
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def get_speaker_bookings(self, speaker_id: str) -> list[Booking]:
        return self.repo.get_speaker_bookings(self.db, speaker_id)

    def get_user_bookings(self, user_id: str) -> list[Booking]:
        return self.repo.get_user_bookings(self.db, user_id)

    def slot_start_taken(self, start: datetime) -> bool:
        return self.repo.get_booking_by_start(self.db, to_utc_naive(start)) is not None

    def find_overlapping(self, start: datetime, end: datetime) -> list[Booking]:
        return self.repo.find_overlapping(self.db, to_utc_naive(start), to_utc_naive(end))

    # ============================================================================
    # RESERVATIONS
    # ============================================================================

    def reserve_speaker_slot(self, speaker: Speaker, start: datetime, end: datetime) -> Booking:
        """
        Create a one-hour slot owned by a speaker

        The slot row and the speaker reservation are written in a single
        transaction. The unique index on session_start_time backs the
        collision check, so a concurrent duplicate also ends as ConflictError.

        Raises:
            ValidationError: window breaks the hour rules
            ConflictError: start time taken (or overlapping, when enabled)
            PersistenceError / UnavailableError: store failure
        """
        start, end = validate_speaker_window(start, end)

        if self.slot_start_taken(start):
            logger.warning(f"⚠️ Speaker {speaker.id} requested taken start {start.isoformat()}")
            raise ConflictError(SLOT_TAKEN)

        if self.overlap_check:
            overlapping = self.find_overlapping(start, end)
            if overlapping:
                raise ConflictError(
                    "Slot overlaps an existing booking",
                    details={"bookingIds": [b.id for b in overlapping]},
                )

        try:
            booking = self.repo.add_booking(self.db, start, end)
            self.repo.add_speaker_reservation(self.db, booking.id, speaker.id)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Start time collision on insert for speaker {speaker.id}: {e.orig}")
            raise ConflictError(SLOT_TAKEN) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create booking for speaker {speaker.id}: {e}")
            raise from_db_error(e, "creating booking") from e

        self.db.refresh(booking)
        logger.info(f"✅ Booking {booking.id} created by speaker {speaker.id}")
        return booking

    def reserve_user_slot(self, user: User, booking_id: str) -> Booking:
        """
        Attach a user to an existing slot

        The window rules are not re-checked here; any existing slot can be joined.
        """
        booking = self.get_booking(booking_id)

        if self.repo.get_user_reservation(self.db, booking_id, user.id):
            raise ConflictError("You have already booked this slot")

        try:
            self.repo.add_user_reservation(self.db, booking_id, user.id)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("You have already booked this slot") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to book slot {booking_id} for user {user.id}: {e}")
            raise from_db_error(e, "booking slot") from e

        logger.info(f"✅ User {user.id} booked slot {booking_id}")
        return booking

    # ============================================================================
    # CANCELLATION
    # ============================================================================

    def cancel_speaker_slot(self, speaker_id: str, booking_id: str) -> None:
        """Speaker withdraws a slot: the slot and every reservation on it go"""
        if not self.repo.get_speaker_reservation(self.db, booking_id, speaker_id):
            raise NotFoundError("Booking not found")
        self._destroy(booking_id)
        logger.info(f"🗑️ Speaker {speaker_id} cancelled booking {booking_id}")

    def cancel_user_reservation(self, user_id: str, booking_id: str) -> None:
        """User drops out of a slot; the slot itself stays"""
        reservation = self.repo.get_user_reservation(self.db, booking_id, user_id)
        if not reservation:
            raise NotFoundError("Booking not found")

        try:
            self.repo.delete_user_reservation(self.db, reservation)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to cancel reservation {booking_id} for user {user_id}: {e}")
            raise from_db_error(e, "cancelling reservation") from e

        logger.info(f"🗑️ User {user_id} cancelled reservation on {booking_id}")

    def cancel_booking(self, principal: Principal, booking_id: str) -> None:
        """Destroy a slot on behalf of anyone holding a reservation on it"""
        holder = None
        if principal.role == ROLE_SPEAKER:
            holder = self.repo.get_speaker_reservation(self.db, booking_id, principal.id)
        elif principal.role == ROLE_USER:
            holder = self.repo.get_user_reservation(self.db, booking_id, principal.id)

        if not holder:
            raise NotFoundError("Booking not found")

        self._destroy(booking_id)
        logger.info(f"🗑️ {principal.role} {principal.id} cancelled booking {booking_id}")

    def delete_speaker_slots(self, speaker_id: str) -> list[str]:
        """
        Stage removal of every slot a speaker owns, without committing

        Used when the speaker account itself is deleted; the caller commits.
        """
        booking_ids = self.repo.get_speaker_booking_ids(self.db, speaker_id)
        for booking_id in booking_ids:
            self.repo.delete_booking(self.db, booking_id)
        return booking_ids

    def _destroy(self, booking_id: str) -> None:
        try:
            self.repo.delete_booking(self.db, booking_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to cancel booking {booking_id}: {e}")
            raise from_db_error(e, "cancelling booking") from e
