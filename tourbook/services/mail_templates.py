"""HTML/text bodies for the emails the API sends."""

from datetime import date, datetime
from html import escape


def format_booking_date(value: date | datetime) -> str:
    """Monday, March 2, 2026"""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def render_otp_email(*, name: str, code: str, ttl_minutes: int) -> tuple[str, str, str]:
    """Return (subject, text, html) for an OTP email."""
    subject = "Your One-Time Password (OTP)"
    text = (
        f"Hello {name},\n\n"
        f"Your verification code is: {code}\n"
        f"This code will expire in {ttl_minutes} minutes.\n\n"
        "If you didn't request this code, please ignore this email."
    )
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e2e8f0; border-radius: 8px;">
  <h2 style="color: #2563eb; text-align: center;">OTP Verification</h2>
  <p>Hello {escape(name)},</p>
  <p>Your verification code is:</p>
  <div style="background: #f8fafc; padding: 15px; text-align: center; margin: 20px 0; font-size: 24px; letter-spacing: 5px; color: #1e293b;">
    <strong>{escape(code)}</strong>
  </div>
  <p>This code will expire in <strong>{ttl_minutes} minutes</strong>.</p>
  <p style="color: #64748b; font-size: 14px; border-top: 1px solid #e2e8f0; padding-top: 15px; margin-top: 25px;">
    If you didn't request this code, please ignore this email.
  </p>
</div>
"""
    return subject, text, html


def render_booking_confirmation(
    *,
    customer_name: str,
    tour_name: str,
    booking_date: date | datetime,
    booking_reference: str,
    participants: int,
    company_name: str,
    booking_portal_url: str,
    support_email: str,
) -> tuple[str, str, str]:
    formatted_date = format_booking_date(booking_date)
    subject = f"Booking Confirmation: {tour_name} (Ref: {booking_reference})"
    text = (
        f"Dear {customer_name},\n\n"
        f'Your booking for "{tour_name}" on {formatted_date} is confirmed!\n\n'
        f"Booking Reference: {booking_reference}\n"
        f"Participants: {participants}\n\n"
        "Thank you for choosing us!\n\n"
        f"Best regards,\n{company_name}"
    )
    year = datetime.now().year
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #2563eb;">Booking Confirmed</h2>
  <p>Dear {escape(customer_name)},</p>
  <p>Your booking for <strong>{escape(tour_name)}</strong> on {escape(formatted_date)} is confirmed!</p>
  <table style="margin: 20px 0;">
    <tr><td>Booking Reference:</td><td><strong>{escape(booking_reference)}</strong></td></tr>
    <tr><td>Participants:</td><td>{participants}</td></tr>
  </table>
  <p><a href="{escape(booking_portal_url)}">Manage your booking</a></p>
  <p style="color: #64748b; font-size: 14px;">Questions? Write to {escape(support_email)}.</p>
  <p style="color: #94a3b8; font-size: 12px;">&copy; {year} {escape(company_name)}</p>
</div>
"""
    return subject, text, html


def render_inquiry_notification(
    *, name: str, email: str, phone: str | None, message: str, package: str | None
) -> tuple[str, str, str]:
    subject = f"New inquiry from {name}" + (f" about {package}" if package else "")
    lines = [
        f"Name: {name}",
        f"Email: {email}",
        f"Phone: {phone or '-'}",
        f"Package: {package or '-'}",
        "",
        message,
    ]
    text = "\n".join(lines)
    html = "<div>" + "".join(f"<p>{escape(line)}</p>" for line in lines if line) + "</div>"
    return subject, text, html
