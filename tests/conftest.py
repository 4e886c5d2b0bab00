"""
Shared fixtures: in-memory SQLite, an in-process Redis stand-in and a
recording mailer, wired into the app through create_app().
"""

import os

# Set before any talktix import so config picks them up
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SECURITY_HEADERS_ENABLED", "true")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from talktix.database import Base
from talktix.email_service import EmailDeliveryError
from talktix.main import create_app
from talktix.models import Speaker, User
from talktix.security_utils import hash_password

from .helpers import PASSWORD, auth_headers


class FakeRedis:
    """Just enough of redis.Redis for the OTP store and the cache"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = str(value)
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def ping(self):
        return True

    def close(self):
        pass


class FakeEmailService:
    """Records every send instead of talking to SMTP/Resend"""

    def __init__(self):
        self.sent = []
        self.fail = False

    def _record(self, kind, **kwargs):
        if self.fail:
            raise EmailDeliveryError("SMTP failed: connection refused")
        self.sent.append({"kind": kind, **kwargs})
        return {"id": f"fake-{len(self.sent)}", "success": True}

    def send_email_verification_otp(self, to, user_name, otp):
        return self._record("otp", to=to, user_name=user_name, otp=otp)

    def send_booking_confirmation(self, to, recipient_name, booking_id, start_time, end_time):
        return self._record(
            "confirmation",
            to=to,
            recipient_name=recipient_name,
            booking_id=booking_id,
            start_time=start_time,
            end_time=end_time,
        )

    def send_calendar_invite(
        self, to, recipient_name, event_name, start_time, end_time, ics_content
    ):
        return self._record(
            "invite",
            to=to,
            recipient_name=recipient_name,
            event_name=event_name,
            start_time=start_time,
            end_time=end_time,
            ics_content=ics_content,
        )

    def of_kind(self, kind):
        return [message for message in self.sent if message["kind"] == kind]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def mailer():
    return FakeEmailService()


@pytest.fixture
def app(session_factory, fake_redis, mailer):
    return create_app(session_factory=session_factory, redis_client=fake_redis, email_service=mailer)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def speaker(db):
    speaker = Speaker(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password=hash_password(PASSWORD),
        price_per_session=Decimal("120.00"),
        bio="Talks about analytical engines.",
    )
    db.add(speaker)
    db.commit()
    db.refresh(speaker)
    return speaker


@pytest.fixture
def other_speaker(db):
    speaker = Speaker(
        first_name="Grace",
        last_name="Hopper",
        email="grace@example.com",
        password=hash_password(PASSWORD),
        price_per_session=Decimal("90.00"),
    )
    db.add(speaker)
    db.commit()
    db.refresh(speaker)
    return speaker


@pytest.fixture
def user(db):
    user = User(
        first_name="Alan",
        last_name="Turing",
        email="alan@example.com",
        password=hash_password(PASSWORD),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def speaker_headers(speaker):
    return auth_headers(speaker.id, "speaker")


@pytest.fixture
def user_headers(user):
    return auth_headers(user.id, "user")
