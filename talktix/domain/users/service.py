"""User service - Business logic for user accounts"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import ROLE_USER
from ...email_service import EmailDeliveryError, EmailService
from ...errors import AuthError, ConflictError, NotFoundError, UnavailableError, from_db_error
from ...models import User
from ...security_utils import create_access_token, hash_password, verify_password
from ...services.otp_service import OTPService
from .repository import UserRepository
from .schemas import UserSignup, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user business logic"""

    def __init__(
        self,
        db: Session,
        otp_service: Optional[OTPService] = None,
        email_service: Optional[EmailService] = None,
    ):
        self.db = db
        self.repo = UserRepository()
        self.otp_service = otp_service
        self.email_service = email_service

    def list_users(self) -> list[User]:
        return self.repo.list_users(self.db)

    def get_user(self, user_id: str) -> User:
        user = self.repo.get_user_by_id(self.db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def signup(self, data: UserSignup) -> tuple[User, str]:
        """Create an account and issue its first token"""
        if self.repo.get_user_by_email(self.db, data.email):
            raise ConflictError("Email already registered")

        try:
            user = self.repo.create_user(
                self.db,
                first_name=data.firstName,
                last_name=data.lastName,
                email=data.email,
                password=hash_password(data.password),
            )
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create user {data.email}: {e}")
            raise from_db_error(e, "creating user") from e

        logger.info(f"✅ User created: {user.id}")
        return user, create_access_token(user.id, ROLE_USER)

    def login(self, email: str, password: str) -> tuple[User, str]:
        user = self.repo.get_user_by_email(self.db, email.strip().lower())
        if not user or not verify_password(password, user.password):
            logger.warning(f"⚠️ Failed user login for {email}")
            raise AuthError("Invalid credentials")
        return user, create_access_token(user.id, ROLE_USER)

    def update_user(self, user_id: str, data: UserUpdate) -> User:
        user = self.get_user(user_id)

        if data.email and data.email != user.email:
            if self.repo.get_user_by_email(self.db, data.email):
                raise ConflictError("Email already registered")

        try:
            return self.repo.update_user(
                self.db,
                user,
                first_name=data.firstName,
                last_name=data.lastName,
                email=data.email,
            )
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise from_db_error(e, "updating user") from e

    # ============================================
    # Email verification
    # ============================================

    def send_otp(self, user_id: str) -> None:
        """Store a fresh code and email it to the user"""
        user = self.get_user(user_id)
        otp = self.otp_service.generate_otp()
        self.otp_service.store_otp(user.id, otp)

        try:
            self.email_service.send_email_verification_otp(user.email, user.first_name, otp)
        except EmailDeliveryError as e:
            logger.error(f"❌ Failed to send OTP email to {user.email}: {e}")
            raise UnavailableError("Failed to send verification email") from e

        logger.info(f"📧 OTP sent to user {user.id}")

    def verify(self, user_id: str, otp: str) -> User:
        user = self.get_user(user_id)
        self.otp_service.verify_otp(user.id, otp)
        try:
            return self.repo.update_user(self.db, user, is_verified=True)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise from_db_error(e, "verifying user") from e
