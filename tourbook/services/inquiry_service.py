from typing import List, Optional

from beanie import PydanticObjectId as OID
from bson.errors import InvalidId

from tourbook.config import get_settings
from tourbook.constants import InquiryStatus
from tourbook.errors import NotFound
from tourbook.models import Inquiry
from tourbook.schemas import InquiryIn
from tourbook.services.mail_templates import render_inquiry_notification
from tourbook.utils.logger import get_logger
from tourbook.utils.mailer import EmailSendError, Mailer

logger = get_logger("inquiries")


async def create_inquiry(payload: InquiryIn, mailer: Mailer) -> Inquiry:
    """Store the inquiry, then notify support. A failed notification does not fail the request."""
    inquiry = Inquiry(
        name=payload.name.strip(),
        email=payload.email.strip().lower(),
        phone=(payload.phone or "").strip() or None,
        message=payload.message.strip(),
        package=payload.package,
    )
    await inquiry.insert()
    logger.info(f"Inquiry {inquiry.id} created")

    subject, text, html = render_inquiry_notification(
        name=inquiry.name,
        email=inquiry.email,
        phone=inquiry.phone,
        message=inquiry.message,
        package=inquiry.package,
    )
    try:
        await mailer.send(to=get_settings().SUPPORT_EMAIL, subject=subject, text=text, html=html)
    except EmailSendError as e:
        logger.warning(f"Inquiry {inquiry.id} notification not sent: {e}")
    return inquiry


async def list_inquiries(status: Optional[InquiryStatus] = None) -> List[Inquiry]:
    query = Inquiry.find(Inquiry.status == status.value) if status else Inquiry.find_all()
    return await query.sort(-Inquiry.created_at).to_list()


async def update_inquiry_status(inquiry_id: str, status: InquiryStatus) -> Inquiry:
    try:
        inquiry = await Inquiry.get(OID(inquiry_id))
    except InvalidId:
        inquiry = None
    if not inquiry:
        raise NotFound("Inquiry not found")
    inquiry.status = status.value
    await inquiry.save()
    return inquiry
