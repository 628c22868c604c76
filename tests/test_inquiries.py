from tourbook.deps import get_email_sender
from tourbook.main import app
from tourbook.utils.mailer import EmailSendError

INQUIRY = {
    "name": " Ravi ",
    "email": "Ravi@Example.com",
    "phone": "9123456780",
    "message": "Any group discounts for 8 people?",
    "package": "Kerala Backwaters",
}


class DownMailer:
    async def send(self, *, to, subject, text, html=None):
        raise EmailSendError("smtp down")


def test_create_inquiry_notifies_support(client, mongo_db, mailer):
    res = client.post("/api/inquiries", json=INQUIRY)

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["name"] == "Ravi"
    assert data["email"] == "ravi@example.com"
    assert data["status"] == "new"

    (sent,) = mailer.outbox
    assert sent["to"] == "support@example.com"
    assert sent["subject"] == "New inquiry from Ravi about Kerala Backwaters"
    assert "Any group discounts for 8 people?" in sent["text"]


def test_inquiry_is_kept_when_notification_fails(client, mongo_db):
    app.dependency_overrides[get_email_sender] = lambda: DownMailer()

    res = client.post("/api/inquiries", json=INQUIRY)

    assert res.status_code == 201
    assert client.get("/api/inquiries").json()["count"] == 1


def test_list_and_update_status(client, mongo_db):
    first = client.post("/api/inquiries", json=INQUIRY).json()["data"]["id"]
    client.post("/api/inquiries", json={**INQUIRY, "name": "Meera"})

    res = client.patch(f"/api/inquiries/{first}", json={"status": "resolved"})
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "resolved"

    assert client.get("/api/inquiries").json()["count"] == 2
    resolved = client.get("/api/inquiries", params={"status": "resolved"}).json()
    assert resolved["count"] == 1
    assert resolved["data"][0]["id"] == first
    assert client.get("/api/inquiries", params={"status": "new"}).json()["data"][0]["name"] == "Meera"


def test_update_unknown_inquiry(client, mongo_db):
    res = client.patch("/api/inquiries/not-an-id", json={"status": "resolved"})
    assert res.status_code == 404
    assert res.json()["error"] == "Inquiry not found"


def test_unknown_status_is_rejected(client, mongo_db):
    inquiry_id = client.post("/api/inquiries", json=INQUIRY).json()["data"]["id"]
    res = client.patch(f"/api/inquiries/{inquiry_id}", json={"status": "archived"})
    assert res.status_code == 422
    assert res.json()["code"] == "VALIDATION_ERROR"
