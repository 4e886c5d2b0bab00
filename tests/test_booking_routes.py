from talktix.cache import BOOKINGS_ALL_KEY, booking_key
from talktix.models import Booking, BookingUser

from .helpers import auth_headers

BOOKINGS = "/api/v1/bookings"
WINDOW = {"sessionStartTime": "2030-01-10T09:00:00Z", "sessionEndTime": "2030-01-10T10:00:00Z"}


def _create(client, headers, window=WINDOW, path=f"{BOOKINGS}/create"):
    return client.post(path, json=window, headers=headers)


class TestCreateBooking:
    def test_speaker_creates_slot(self, client, speaker, speaker_headers, mailer):
        response = _create(client, speaker_headers)

        assert response.status_code == 201
        booking = response.json()["booking"]
        assert len(booking["id"]) == 26
        assert booking["speakerId"] == speaker.id
        assert booking["sessionStartTime"] == "2030-01-10T09:00:00Z"
        assert booking["sessionEndTime"] == "2030-01-10T10:00:00Z"

        # Background notifications run before TestClient returns
        assert [m["kind"] for m in mailer.sent] == ["confirmation", "invite"]
        assert mailer.sent[0]["to"] == speaker.email
        assert f"UID:{booking['id']}@talktix.com" in mailer.sent[1]["ics_content"]

    def test_speaker_booking_book_route_is_equivalent(self, client, speaker_headers):
        response = _create(client, speaker_headers, path="/api/v1/speaker-booking/book")
        assert response.status_code == 201

    def test_second_request_for_same_start_conflicts(self, client, speaker_headers, other_speaker, db):
        assert _create(client, speaker_headers).status_code == 201

        response = _create(client, auth_headers(other_speaker.id, "speaker"))

        assert response.status_code == 409
        assert response.json()["code"] == "ConflictError"
        assert db.query(Booking).count() == 1

    def test_invalid_window_lists_violations(self, client, speaker_headers, mailer, db):
        window = {"sessionStartTime": "2030-01-10T08:00:00Z", "sessionEndTime": "2030-01-10T10:00:00Z"}

        response = _create(client, speaker_headers, window)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ValidationError"
        assert len(body["details"]["violations"]) == 2
        assert db.query(Booking).count() == 0

    def test_overnight_window_is_rejected(self, client, speaker_headers, mailer, db):
        window = {"sessionStartTime": "2030-01-10T23:00:00Z", "sessionEndTime": "2030-01-11T00:00:00Z"}

        response = _create(client, speaker_headers, window)

        assert response.status_code == 400
        assert response.json()["details"]["violations"] == [
            "Session must run between 09:00 and 16:00 UTC"
        ]
        assert db.query(Booking).count() == 0
        assert mailer.sent == []

    def test_offset_timestamps_are_read_as_utc(self, client, speaker_headers):
        window = {
            "sessionStartTime": "2030-01-10T11:00:00+02:00",
            "sessionEndTime": "2030-01-10T12:00:00+02:00",
        }
        response = _create(client, speaker_headers, window)

        assert response.status_code == 201
        assert response.json()["booking"]["sessionStartTime"] == "2030-01-10T09:00:00Z"

    def test_missing_fields_are_bad_request(self, client, speaker_headers):
        response = client.post(
            f"{BOOKINGS}/create", json={"sessionStartTime": "2030-01-10T09:00:00Z"}, headers=speaker_headers
        )
        assert response.status_code == 400

    def test_requires_token(self, client):
        assert _create(client, {}).status_code == 401

    def test_garbage_token_is_unauthorized(self, client):
        assert _create(client, {"Authorization": "Bearer nope"}).status_code == 401

    def test_users_cannot_create_slots(self, client, user_headers):
        response = _create(client, user_headers)
        assert response.status_code == 403

    def test_mail_failure_does_not_fail_booking(self, client, speaker_headers, mailer):
        mailer.fail = True
        assert _create(client, speaker_headers).status_code == 201


class TestReadBookings:
    def test_listing_is_cached_and_invalidated(self, client, speaker_headers, fake_redis):
        assert client.get(BOOKINGS).json() == {"bookings": []}
        assert BOOKINGS_ALL_KEY in fake_redis.store

        created = _create(client, speaker_headers).json()["booking"]
        assert BOOKINGS_ALL_KEY not in fake_redis.store

        listing = client.get(BOOKINGS).json()["bookings"]
        assert [b["id"] for b in listing] == [created["id"]]

    def test_cached_listing_is_served_without_db(self, client, fake_redis):
        fake_redis.setex(BOOKINGS_ALL_KEY, 3600, '{"bookings": []}')
        assert client.get(BOOKINGS).json() == {"bookings": []}

    def test_get_single_booking(self, client, speaker_headers, fake_redis):
        created = _create(client, speaker_headers).json()["booking"]

        response = client.get(f"{BOOKINGS}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["booking"]["sessionStartTime"] == "2030-01-10T09:00:00Z"
        assert booking_key(created["id"]) in fake_redis.store

    def test_unknown_booking_is_not_found(self, client):
        assert client.get(f"{BOOKINGS}/01ARZ3NDEKTSV4RRFFQ69G5FAV").status_code == 404


class TestUserBooking:
    def _slot_id(self, client, speaker_headers):
        return _create(client, speaker_headers).json()["booking"]["id"]

    def test_user_books_existing_slot(self, client, speaker_headers, user, user_headers, mailer):
        booking_id = self._slot_id(client, speaker_headers)
        mailer.sent.clear()

        response = client.post(
            "/api/v1/user-booking/book", json={"bookingId": booking_id}, headers=user_headers
        )

        assert response.status_code == 201
        assert response.json()["booking"]["id"] == booking_id
        assert [m["to"] for m in mailer.sent] == [user.email, user.email]

        listing = client.get("/api/v1/user-booking/bookings", headers=user_headers).json()
        assert [b["id"] for b in listing["bookings"]] == [booking_id]

    def test_double_booking_conflicts(self, client, speaker_headers, user_headers):
        booking_id = self._slot_id(client, speaker_headers)
        body = {"bookingId": booking_id}
        client.post("/api/v1/user-booking/book", json=body, headers=user_headers)

        response = client.post("/api/v1/user-booking/book", json=body, headers=user_headers)
        assert response.status_code == 409

    def test_booking_missing_slot_is_not_found(self, client, user_headers):
        response = client.post(
            "/api/v1/user-booking/book",
            json={"bookingId": "01ARZ3NDEKTSV4RRFFQ69G5FAV"},
            headers=user_headers,
        )
        assert response.status_code == 404

    def test_user_delete_keeps_slot(self, client, speaker_headers, user_headers, db):
        booking_id = self._slot_id(client, speaker_headers)
        client.post("/api/v1/user-booking/book", json={"bookingId": booking_id}, headers=user_headers)

        response = client.post(
            "/api/v1/user-booking/delete", json={"bookingId": booking_id}, headers=user_headers
        )

        assert response.status_code == 200
        assert db.query(BookingUser).count() == 0
        assert client.get(f"{BOOKINGS}/{booking_id}").status_code == 200

    def test_speakers_cannot_use_user_routes(self, client, speaker_headers):
        assert client.get("/api/v1/user-booking/bookings", headers=speaker_headers).status_code == 403


class TestSpeakerBooking:
    def test_speaker_lists_own_slots(self, client, speaker_headers, other_speaker):
        mine = _create(client, speaker_headers).json()["booking"]["id"]
        other_window = {"sessionStartTime": "2030-01-10T10:00:00Z", "sessionEndTime": "2030-01-10T11:00:00Z"}
        _create(client, auth_headers(other_speaker.id, "speaker"), other_window)

        listing = client.get("/api/v1/speaker-booking/bookings", headers=speaker_headers).json()
        assert [b["id"] for b in listing["bookings"]] == [mine]

    def test_speaker_delete_removes_slot_and_attendees(self, client, speaker_headers, user_headers, db):
        booking_id = _create(client, speaker_headers).json()["booking"]["id"]
        client.post("/api/v1/user-booking/book", json={"bookingId": booking_id}, headers=user_headers)

        response = client.post(
            "/api/v1/speaker-booking/delete", json={"bookingId": booking_id}, headers=speaker_headers
        )

        assert response.status_code == 200
        assert db.query(Booking).count() == 0
        assert db.query(BookingUser).count() == 0
        assert client.get(f"{BOOKINGS}/{booking_id}").status_code == 404

    def test_speaker_cannot_delete_foreign_slot(self, client, speaker_headers, other_speaker, db):
        booking_id = _create(client, speaker_headers).json()["booking"]["id"]

        response = client.post(
            "/api/v1/speaker-booking/delete",
            json={"bookingId": booking_id},
            headers=auth_headers(other_speaker.id, "speaker"),
        )

        assert response.status_code == 404
        assert db.query(Booking).count() == 1


class TestCancelBooking:
    def test_attendee_can_cancel(self, client, speaker_headers, user_headers, db, fake_redis):
        booking_id = _create(client, speaker_headers).json()["booking"]["id"]
        client.post("/api/v1/user-booking/book", json={"bookingId": booking_id}, headers=user_headers)
        client.get(f"{BOOKINGS}/{booking_id}")

        response = client.post(f"{BOOKINGS}/cancel/{booking_id}", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["bookingId"] == booking_id
        assert db.query(Booking).count() == 0
        assert booking_key(booking_id) not in fake_redis.store

    def test_stranger_cannot_cancel(self, client, speaker_headers, user_headers, db):
        booking_id = _create(client, speaker_headers).json()["booking"]["id"]

        response = client.post(f"{BOOKINGS}/cancel/{booking_id}", headers=user_headers)

        assert response.status_code == 404
        assert db.query(Booking).count() == 1

    def test_cancel_requires_token(self, client):
        assert client.post(f"{BOOKINGS}/cancel/01ARZ3NDEKTSV4RRFFQ69G5FAV").status_code == 401
