from datetime import timedelta

from talktix.security_utils import (
    create_access_token,
    decode_access_token,
    hash_password,
    is_strong_password,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = hash_password("Secret@123")
    assert hashed != "Secret@123"
    assert verify_password("Secret@123", hashed)
    assert not verify_password("secret@123", hashed)


def test_garbage_hash_does_not_verify():
    assert verify_password("Secret@123", "not-a-bcrypt-hash") is False


def test_password_strength():
    assert is_strong_password("Secret@123")
    assert not is_strong_password("secret@123")
    assert not is_strong_password("Secret123")
    assert not is_strong_password("Se@1")


def test_token_carries_identity_and_role():
    payload = decode_access_token(create_access_token("01HZY3Q7V0N9ZK4F2P8R6T1W3X", "speaker"))
    assert payload["userId"] == "01HZY3Q7V0N9ZK4F2P8R6T1W3X"
    assert payload["role"] == "speaker"
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = create_access_token("abc", "user", expires_delta=timedelta(seconds=-5))
    assert decode_access_token(token) is None


def test_tampered_token_is_rejected():
    token = create_access_token("abc", "user")
    assert decode_access_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB")) is None
