from datetime import date

from tourbook.services.mail_templates import (
    format_booking_date,
    render_booking_confirmation,
    render_inquiry_notification,
)


def test_booking_date_is_spelled_out():
    assert format_booking_date(date(2026, 3, 2)) == "Monday, March 2, 2026"


def test_booking_confirmation_template_escapes_html():
    subject, text, html = render_booking_confirmation(
        customer_name="<b>Asha</b>",
        tour_name="Kerala Backwaters",
        booking_date=date(2026, 3, 2),
        booking_reference="TB-1042",
        participants=2,
        company_name="Adventure Tours",
        booking_portal_url="https://example.com/bookings",
        support_email="support@example.com",
    )

    assert subject == "Booking Confirmation: Kerala Backwaters (Ref: TB-1042)"
    assert "Monday, March 2, 2026" in text
    assert "Participants: 2" in text
    assert "&lt;b&gt;Asha&lt;/b&gt;" in html
    assert "<b>Asha</b>" not in html


def test_inquiry_notification_without_package():
    subject, text, _ = render_inquiry_notification(
        name="Ravi", email="ravi@example.com", phone=None, message="Any group discounts?", package=None
    )
    assert subject == "New inquiry from Ravi"
    assert "Phone: -" in text
    assert text.endswith("Any group discounts?")


def test_booking_confirmation_route_sends_email(client, mailer):
    res = client.post(
        "/api/mail/booking-confirmation",
        json={
            "customerEmail": "asha@example.com",
            "customerName": "Asha",
            "tourName": "Kerala Backwaters",
            "bookingDate": "2026-03-02",
            "bookingReference": "TB-1042",
            "participants": 3,
        },
    )

    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "message": "Booking confirmed and confirmation email sent",
        "bookingReference": "TB-1042",
        "messageId": "<msg-1@test>",
    }
    (sent,) = mailer.outbox
    assert sent["to"] == "asha@example.com"
    assert "Participants: 3" in sent["text"]


def test_booking_confirmation_requires_fields(client, mailer):
    res = client.post("/api/mail/booking-confirmation", json={"customerEmail": "asha@example.com"})

    assert res.status_code == 422
    error = res.json()["error"]
    assert error.startswith("Missing required fields:")
    assert "tourName" in error
    assert mailer.outbox == []


def test_package_payload_is_validated_before_storage(client):
    res = client.post("/api/packages", json={"name": "Kerala", "original_price": -1})
    assert res.status_code == 422
    assert "country" in res.json()["error"]
