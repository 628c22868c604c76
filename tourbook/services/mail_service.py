from tourbook.config import get_settings
from tourbook.schemas import BookingConfirmationIn
from tourbook.services.mail_templates import render_booking_confirmation
from tourbook.utils.mailer import Mailer


async def send_booking_confirmation(mailer: Mailer, booking: BookingConfirmationIn) -> str:
    """Render and send the booking confirmation email. Returns the message id."""
    settings = get_settings()
    subject, text, html = render_booking_confirmation(
        customer_name=booking.customerName,
        tour_name=booking.tourName,
        booking_date=booking.bookingDate,
        booking_reference=booking.bookingReference,
        participants=booking.participants,
        company_name=settings.COMPANY_NAME,
        booking_portal_url=settings.BOOKING_PORTAL_URL,
        support_email=settings.SUPPORT_EMAIL,
    )
    return await mailer.send(to=booking.customerEmail, subject=subject, text=text, html=html)
