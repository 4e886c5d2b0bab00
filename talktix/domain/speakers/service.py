"""Speaker service - Business logic for speaker accounts"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import ROLE_SPEAKER
from ...email_service import EmailDeliveryError, EmailService
from ...errors import AuthError, ConflictError, NotFoundError, UnavailableError, from_db_error
from ...models import Speaker
from ...security_utils import create_access_token, hash_password, verify_password
from ...services.otp_service import OTPService
from ..bookings.service import BookingService
from .repository import SpeakerRepository
from .schemas import SpeakerSignup, SpeakerUpdate

logger = logging.getLogger(__name__)


class SpeakerService:
    """Service layer for speaker business logic"""

    def __init__(
        self,
        db: Session,
        otp_service: Optional[OTPService] = None,
        email_service: Optional[EmailService] = None,
    ):
        self.db = db
        self.repo = SpeakerRepository()
        self.otp_service = otp_service
        self.email_service = email_service

    def list_speakers(self) -> list[Speaker]:
        return self.repo.list_speakers(self.db)

    def get_speaker(self, speaker_id: str) -> Speaker:
        speaker = self.repo.get_speaker_by_id(self.db, speaker_id)
        if not speaker:
            raise NotFoundError("Speaker not found")
        return speaker

    def signup(self, data: SpeakerSignup) -> tuple[Speaker, str]:
        """Create a speaker account and issue its first token"""
        if self.repo.get_speaker_by_email(self.db, data.email):
            raise ConflictError("Email already registered")

        try:
            speaker = self.repo.create_speaker(
                self.db,
                first_name=data.firstName,
                last_name=data.lastName,
                email=data.email,
                password=hash_password(data.password),
                price_per_session=Decimal(data.pricePerSession),
                bio=data.bio,
            )
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create speaker {data.email}: {e}")
            raise from_db_error(e, "creating speaker") from e

        logger.info(f"✅ Speaker created: {speaker.id}")
        return speaker, create_access_token(speaker.id, ROLE_SPEAKER)

    def login(self, email: str, password: str) -> tuple[Speaker, str]:
        speaker = self.repo.get_speaker_by_email(self.db, email.strip().lower())
        if not speaker or not verify_password(password, speaker.password):
            logger.warning(f"⚠️ Failed speaker login for {email}")
            raise AuthError("Invalid credentials")
        return speaker, create_access_token(speaker.id, ROLE_SPEAKER)

    def update_speaker(self, speaker_id: str, data: SpeakerUpdate) -> Speaker:
        speaker = self.get_speaker(speaker_id)

        if data.email and data.email != speaker.email:
            if self.repo.get_speaker_by_email(self.db, data.email):
                raise ConflictError("Email already registered")

        updates = {
            "first_name": data.firstName,
            "last_name": data.lastName,
            "email": data.email,
            "bio": data.bio,
        }
        if data.pricePerSession is not None:
            updates["price_per_session"] = Decimal(data.pricePerSession)

        try:
            return self.repo.update_speaker(self.db, speaker, **updates)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise from_db_error(e, "updating speaker") from e

    def delete_speaker(self, speaker_id: str) -> list[str]:
        """
        Remove a speaker together with every slot they own

        Returns:
            IDs of the slots that were removed
        """
        self.get_speaker(speaker_id)
        try:
            booking_ids = BookingService(self.db).delete_speaker_slots(speaker_id)
            self.repo.delete_speaker(self.db, speaker_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete speaker {speaker_id}: {e}")
            raise from_db_error(e, "deleting speaker") from e

        logger.info(f"🗑️ Speaker {speaker_id} deleted with {len(booking_ids)} slot(s)")
        return booking_ids

    # ============================================
    # Email verification
    # ============================================

    def send_otp(self, speaker_id: str) -> None:
        """Store a fresh code and email it to the speaker"""
        speaker = self.get_speaker(speaker_id)
        otp = self.otp_service.generate_otp()
        self.otp_service.store_otp(speaker.id, otp)

        try:
            self.email_service.send_email_verification_otp(speaker.email, speaker.first_name, otp)
        except EmailDeliveryError as e:
            logger.error(f"❌ Failed to send OTP email to {speaker.email}: {e}")
            raise UnavailableError("Failed to send verification email") from e

        logger.info(f"📧 OTP sent to speaker {speaker.id}")

    def verify(self, speaker_id: str, otp: str) -> Speaker:
        speaker = self.get_speaker(speaker_id)
        self.otp_service.verify_otp(speaker.id, otp)
        try:
            return self.repo.update_speaker(self.db, speaker, is_verified=True)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise from_db_error(e, "verifying speaker") from e
