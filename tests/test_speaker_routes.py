from talktix.models import Booking, Speaker

from .helpers import PASSWORD, auth_headers

SPEAKERS = "/api/v1/speaker"
SIGNUP = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "password": PASSWORD,
    "pricePerSession": "49.99",
    "bio": "Talks about analytical engines.",
}


class TestSignupAndLogin:
    def test_signup_returns_identity_and_token(self, client):
        response = client.post(f"{SPEAKERS}/signup", json=SIGNUP)

        assert response.status_code == 201
        body = response.json()
        assert body["speaker"]["pricePerSession"] == "49.99"
        assert body["speaker"]["bio"] == SIGNUP["bio"]
        assert body["token"]

    def test_numeric_price_is_accepted(self, client):
        response = client.post(f"{SPEAKERS}/signup", json={**SIGNUP, "pricePerSession": 50})
        assert response.status_code == 201
        assert response.json()["speaker"]["pricePerSession"] == "50.00"

    def test_price_with_three_decimals_is_rejected(self, client):
        response = client.post(f"{SPEAKERS}/signup", json={**SIGNUP, "pricePerSession": "10.999"})
        assert response.status_code == 400

    def test_short_bio_is_rejected(self, client):
        assert client.post(f"{SPEAKERS}/signup", json={**SIGNUP, "bio": "Hi"}).status_code == 400

    def test_empty_email_is_rejected(self, client):
        assert client.post(f"{SPEAKERS}/signup", json={**SIGNUP, "email": ""}).status_code == 400

    def test_created_at_is_utc(self, client):
        response = client.post(f"{SPEAKERS}/signup", json=SIGNUP)
        assert response.json()["speaker"]["createdAt"].endswith("Z")

    def test_duplicate_email_conflicts(self, client):
        client.post(f"{SPEAKERS}/signup", json=SIGNUP)
        assert client.post(f"{SPEAKERS}/signup", json=SIGNUP).status_code == 409

    def test_login(self, client, speaker):
        response = client.post(f"{SPEAKERS}/login", json={"email": speaker.email, "password": PASSWORD})
        assert response.status_code == 200
        assert response.json()["speaker"]["id"] == speaker.id

    def test_login_with_wrong_password(self, client, speaker):
        response = client.post(f"{SPEAKERS}/login", json={"email": speaker.email, "password": "Wrong@1234"})
        assert response.status_code == 401


class TestDirectory:
    def test_public_listing_and_lookup(self, client, speaker):
        listing = client.get(SPEAKERS).json()
        assert [s["id"] for s in listing] == [speaker.id]

        response = client.get(f"{SPEAKERS}/{speaker.id}")
        assert response.status_code == 200
        assert response.json()["pricePerSession"] == "120.00"

    def test_unknown_speaker(self, client):
        assert client.get(f"{SPEAKERS}/01ARZ3NDEKTSV4RRFFQ69G5FAV").status_code == 404


class TestProfile:
    def test_update_own_profile(self, client, speaker, speaker_headers):
        response = client.put(
            f"{SPEAKERS}/update/{speaker.id}",
            json={"pricePerSession": "75.5", "bio": "Now also talks about looms."},
            headers=speaker_headers,
        )
        assert response.status_code == 200
        assert response.json()["pricePerSession"] == "75.50"
        assert response.json()["firstName"] == "Ada"

    def test_update_to_taken_email_conflicts(self, client, speaker, speaker_headers, other_speaker):
        response = client.put(
            f"{SPEAKERS}/update/{speaker.id}",
            json={"email": other_speaker.email},
            headers=speaker_headers,
        )
        assert response.status_code == 409

    def test_cannot_update_someone_else(self, client, speaker, other_speaker):
        response = client.put(
            f"{SPEAKERS}/update/{speaker.id}",
            json={"firstName": "Mallory"},
            headers=auth_headers(other_speaker.id, "speaker"),
        )
        assert response.status_code == 403

    def test_update_to_empty_email_is_rejected(self, client, speaker, speaker_headers, db):
        response = client.put(
            f"{SPEAKERS}/update/{speaker.id}", json={"email": ""}, headers=speaker_headers
        )

        assert response.status_code == 400
        db.refresh(speaker)
        assert speaker.email == "ada@example.com"

    def test_delete_removes_speaker_and_slots(self, client, speaker, speaker_headers, user_headers, db):
        window = {"sessionStartTime": "2030-01-10T09:00:00Z", "sessionEndTime": "2030-01-10T10:00:00Z"}
        booking_id = client.post(
            "/api/v1/bookings/create", json=window, headers=speaker_headers
        ).json()["booking"]["id"]
        client.post("/api/v1/user-booking/book", json={"bookingId": booking_id}, headers=user_headers)
        speaker_id = speaker.id

        response = client.delete(f"{SPEAKERS}/delete/{speaker_id}", headers=speaker_headers)

        assert response.status_code == 200
        assert db.query(Booking).count() == 0
        assert db.query(Speaker).filter(Speaker.id == speaker_id).count() == 0
        assert client.get("/api/v1/bookings").json() == {"bookings": []}


class TestEmailVerification:
    def test_send_and_verify_otp(self, client, speaker, speaker_headers, mailer):
        assert client.post(f"{SPEAKERS}/send-otp/{speaker.id}", headers=speaker_headers).status_code == 200
        otp = mailer.of_kind("otp")[0]["otp"]

        response = client.post(f"{SPEAKERS}/verify/{speaker.id}", json={"otp": otp}, headers=speaker_headers)

        assert response.status_code == 200
        assert response.json()["isVerified"] is True

    def test_user_token_cannot_verify_speaker(self, client, speaker, user_headers):
        response = client.post(f"{SPEAKERS}/verify/{speaker.id}", json={"otp": "123456"}, headers=user_headers)
        assert response.status_code == 403
