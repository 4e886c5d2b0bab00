from unittest.mock import Mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from talktix.errors import InvalidOTPError, UnavailableError
from talktix.services.otp_service import OTPService


@pytest.fixture
def otp_service(fake_redis):
    return OTPService(fake_redis)


def test_generated_code_is_six_digits(otp_service):
    for _ in range(20):
        otp = otp_service.generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()


def test_store_uses_ten_minute_ttl(otp_service, fake_redis):
    otp_service.store_otp("01HZXAMPLE", "123456")

    assert fake_redis.store["otp:01HZXAMPLE"] == "123456"
    assert fake_redis.ttls["otp:01HZXAMPLE"] == 600


def test_matching_code_verifies_once(otp_service, fake_redis):
    otp_service.store_otp("abc", "654321")

    assert otp_service.verify_otp("abc", "654321") is True
    assert "otp:abc" not in fake_redis.store

    with pytest.raises(InvalidOTPError):
        otp_service.verify_otp("abc", "654321")


def test_wrong_code_is_rejected_and_kept(otp_service, fake_redis):
    otp_service.store_otp("abc", "654321")

    with pytest.raises(InvalidOTPError):
        otp_service.verify_otp("abc", "000000")
    assert fake_redis.store["otp:abc"] == "654321"


def test_missing_code_is_rejected(otp_service):
    with pytest.raises(InvalidOTPError):
        otp_service.verify_otp("nobody", "123456")


def test_new_code_replaces_pending_one(otp_service):
    otp_service.store_otp("abc", "111111")
    otp_service.store_otp("abc", "222222")

    with pytest.raises(InvalidOTPError):
        otp_service.verify_otp("abc", "111111")
    assert otp_service.verify_otp("abc", "222222")


def test_redis_outage_is_unavailable():
    broken = Mock()
    broken.setex.side_effect = RedisConnectionError("Connection refused")
    broken.get.side_effect = RedisConnectionError("Connection refused")
    service = OTPService(broken)

    with pytest.raises(UnavailableError):
        service.store_otp("abc", "123456")
    with pytest.raises(UnavailableError):
        service.verify_otp("abc", "123456")


def test_non_ascii_code_is_rejected(otp_service, fake_redis):
    otp_service.store_otp("abc", "123456")

    with pytest.raises(InvalidOTPError):
        otp_service.verify_otp("abc", "12345é")
    assert fake_redis.store["otp:abc"] == "123456"


def test_bytes_from_redis_are_compared(otp_service, fake_redis):
    fake_redis.store["otp:abc"] = b"123456"
    assert otp_service.verify_otp("abc", "123456") is True
