from fastapi import APIRouter, Depends

from tourbook.deps import get_email_sender
from tourbook.schemas import BookingConfirmationIn
from tourbook.services import mail_service
from tourbook.utils.mailer import Mailer

router = APIRouter(prefix="/api/mail", tags=["mail"])


@router.post("/booking-confirmation")
async def route_booking_confirmation(
    payload: BookingConfirmationIn,
    mailer: Mailer = Depends(get_email_sender),
):
    """Email a booking confirmation to the customer."""
    message_id = await mail_service.send_booking_confirmation(mailer, payload)
    return {
        "success": True,
        "message": "Booking confirmed and confirmation email sent",
        "bookingReference": payload.bookingReference,
        "messageId": message_id,
    }
