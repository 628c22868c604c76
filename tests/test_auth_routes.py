import asyncio

from tourbook.security import create_access_token, decode_token, hash_password
from tourbook.services.user_store import NewUser

PHONE = "9876543210"
KEY = "+919876543210"


def _record(store, key=KEY):
    return asyncio.run(store.get(key))


def test_health(client):
    res = client.get("/api/auth/health")
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "healthy"}


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_phone_signup_end_to_end(client, store, gateway, clock, users):
    res = client.post("/api/auth/send-otp", json={"phone": PHONE, "name": "Asha Rao"})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "OTP sent successfully"

    record = _record(store)
    assert record.identifier == KEY
    assert len(record.code) == 6 and record.code.isdigit()
    assert record.attempts == 0
    assert (record.expires_at - clock.now).total_seconds() == 300
    # outside production the code is echoed for debugging
    assert body["debug"] == {"otp": record.code}
    assert gateway.sent[0][0].value == KEY

    res = client.post("/api/auth/verify-otp", json={"phone": PHONE, "otp": "000000"})
    assert res.status_code == 400
    assert res.json() == {
        "success": False,
        "error": "Invalid OTP",
        "code": "INVALID_CODE",
        "attemptsLeft": 2,
    }

    res = client.post(
        "/api/auth/verify-otp",
        json={"phone": PHONE, "otp": record.code, "email": "asha@example.com", "password": "pw-123456"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["isNewUser"] is True
    assert body["message"] == "OTP verified and user registered successfully"
    assert body["user"]["phone"] == KEY
    assert body["user"]["name"] == "Asha Rao"
    assert body["user"]["email"] == "asha@example.com"
    assert decode_token(body["token"]["access_token"])["sub"] == body["user"]["id"]

    assert _record(store) is None
    assert len(users.users) == 1


def test_second_request_within_ttl_is_rate_limited(client, clock):
    assert client.post("/api/auth/send-otp", json={"phone": PHONE}).status_code == 200
    clock.advance(60)

    res = client.post("/api/auth/send-otp", json={"phone": PHONE})

    assert res.status_code == 429
    body = res.json()
    assert body["success"] is False
    assert body["code"] == "COOLDOWN_ACTIVE"
    assert body["retryAfterSeconds"] == 240


def test_invalid_phone_is_rejected(client, gateway):
    res = client.post("/api/auth/send-otp", json={"phone": "12345"})
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_IDENTIFIER"
    assert gateway.sent == []


def test_missing_phone_is_validation_error(client):
    res = client.post("/api/auth/send-otp", json={"name": "Asha"})
    assert res.status_code == 422
    assert res.json()["error"] == "Missing required fields: phone"


def test_delivery_failure_returns_502(client, gateway, store):
    gateway.succeed = False
    res = client.post("/api/auth/send-otp", json={"phone": PHONE})
    assert res.status_code == 502
    assert res.json()["error"] == "Failed to send OTP"
    assert _record(store) is None


def test_verify_without_request(client):
    res = client.post("/api/auth/verify-otp", json={"phone": PHONE, "otp": "123456"})
    assert res.status_code == 400
    assert res.json()["error"] == "OTP not found or expired"


def test_expired_code(client, store, clock):
    client.post("/api/auth/send-otp", json={"phone": PHONE})
    code = _record(store).code
    clock.advance(301)

    res = client.post("/api/auth/verify-otp", json={"phone": PHONE, "otp": code})

    assert res.status_code == 400
    assert res.json()["error"] == "OTP expired"


def test_existing_user_conflict(client, users, gateway):
    asyncio.run(users.create(NewUser(name="Old", phone=KEY, email=None)))
    client.post("/api/auth/send-otp", json={"phone": PHONE})

    res = client.post("/api/auth/verify-otp", json={"phone": PHONE, "otp": gateway.last_code})

    assert res.status_code == 409
    assert res.json()["code"] == "USER_ALREADY_EXISTS"


def test_email_otp_flow(client, gateway):
    res = client.post(
        "/api/auth/email/send-otp",
        json={"email": "Traveller@Example.com", "name": "Ravi", "phone": "9123456780"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "OTP sent to your email"
    assert body["email"] == "traveller@example.com"

    res = client.post(
        "/api/auth/email/verify-otp",
        json={"email": "traveller@example.com", "otp": gateway.last_code},
    )
    assert res.status_code == 200
    user = res.json()["user"]
    assert user["email"] == "traveller@example.com"
    assert user["phone"] == "+919123456780"
    assert user["name"] == "Ravi"


def test_password_login_and_refresh(client, users):
    asyncio.run(
        users.create(
            NewUser(
                name="Asha",
                phone=KEY,
                email="asha@example.com",
                password_hash=hash_password("pw-123456"),
            )
        )
    )

    res = client.post("/api/auth/login", json={"email": "ASHA@example.com", "password": "pw-123456"})
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["email"] == "asha@example.com"

    res = client.post("/api/auth/refresh", json={"refresh_token": body["token"]["refresh_token"]})
    assert res.status_code == 200
    assert decode_token(res.json()["access_token"])["sub"] == body["user"]["id"]


def test_login_with_wrong_password(client, users):
    asyncio.run(
        users.create(
            NewUser(name="Asha", phone=None, email="asha@example.com", password_hash=hash_password("right"))
        )
    )
    res = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "wrong"})
    assert res.status_code == 401
    assert res.json()["error"] == "Incorrect email or password"


def test_login_missing_fields(client):
    res = client.post("/api/auth/login", json={})
    assert res.status_code == 401
    assert res.json()["error"] == "Please provide email and password"


def test_refresh_rejects_access_token(client, users):
    user = asyncio.run(users.create(NewUser(name="A", phone=KEY, email=None)))
    res = client.post("/api/auth/refresh", json={"refresh_token": create_access_token({"sub": user.id})})
    assert res.status_code == 401
    assert res.json()["error"] == "Invalid token type. Expected refresh"
