"""
OTP Service
Short-lived email verification codes kept in Redis under otp:<identity id>
"""

import logging
import secrets

from fastapi import Request
from redis.exceptions import RedisError

from ..config import OTP_LENGTH, OTP_TTL_SECONDS
from ..errors import InvalidOTPError, UnavailableError

logger = logging.getLogger(__name__)

# No attempt counting or rate limiting here: a code can be guessed until it expires.


def otp_key(identity_id: str) -> str:
    return f"otp:{identity_id}"


class OTPService:
    """Generate, store and check one-time codes"""

    def __init__(self, redis_client, ttl_seconds: int = OTP_TTL_SECONDS):
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def generate_otp() -> str:
        """Generate a 6-digit OTP"""
        return "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))

    def store_otp(self, identity_id: str, otp: str) -> None:
        """Store OTP in Redis with expiration (replaces any pending code)"""
        try:
            self.redis_client.setex(otp_key(identity_id), self.ttl_seconds, otp)
        except RedisError as e:
            logger.error(f"❌ Failed to store OTP in Redis for {identity_id}: {e}")
            raise UnavailableError("Verification store unavailable") from e
        logger.info(f"🔑 OTP stored for {identity_id} (TTL: {self.ttl_seconds}s)")

    def verify_otp(self, identity_id: str, otp: str) -> bool:
        """
        Check a submitted code. A match consumes the code.

        Raises:
            InvalidOTPError: no pending code, expired, or mismatch
        """
        key = otp_key(identity_id)
        try:
            stored = self.redis_client.get(key)
        except RedisError as e:
            logger.error(f"❌ Failed to get OTP from Redis for {identity_id}: {e}")
            raise UnavailableError("Verification store unavailable") from e

        if isinstance(stored, str):
            stored = stored.encode("utf-8")

        # Byte comparison; compare_digest rejects non-ASCII str input
        if not stored or not otp or not secrets.compare_digest(stored, str(otp).encode("utf-8")):
            logger.warning(f"⚠️ Invalid or expired OTP for {identity_id}")
            raise InvalidOTPError("Invalid or expired OTP")

        try:
            self.redis_client.delete(key)
        except RedisError as e:
            logger.error(f"❌ Failed to delete OTP from Redis for {identity_id}: {e}")
            raise UnavailableError("Verification store unavailable") from e

        logger.info(f"✅ OTP verified for {identity_id}")
        return True


def get_otp_service(request: Request) -> OTPService:
    """Dependency injection for OTPService"""
    return OTPService(request.app.state.redis)
