from fastapi import APIRouter, Depends, Query
from typing import Optional

from tourbook.constants import InquiryStatus
from tourbook.deps import get_email_sender
from tourbook.models import Inquiry
from tourbook.schemas import InquiryIn, InquiryOut, InquiryStatusUpdate
from tourbook.services import inquiry_service
from tourbook.utils.mailer import Mailer

router = APIRouter(prefix="/api/inquiries", tags=["inquiries"])


def _inquiry_out(inquiry: Inquiry) -> InquiryOut:
    return InquiryOut(
        id=str(inquiry.id),
        name=inquiry.name,
        email=inquiry.email,
        phone=inquiry.phone,
        message=inquiry.message,
        package=inquiry.package,
        status=InquiryStatus(inquiry.status),
        createdAt=inquiry.created_at,
    )


@router.post("", status_code=201)
async def create_inquiry(payload: InquiryIn, mailer: Mailer = Depends(get_email_sender)):
    inquiry = await inquiry_service.create_inquiry(payload, mailer)
    return {"success": True, "message": "Inquiry received", "data": _inquiry_out(inquiry)}


@router.get("")
async def list_inquiries(status: Optional[InquiryStatus] = Query(None)):
    inquiries = await inquiry_service.list_inquiries(status)
    return {
        "success": True,
        "count": len(inquiries),
        "data": [_inquiry_out(i) for i in inquiries],
    }


@router.patch("/{inquiry_id}")
async def update_inquiry(inquiry_id: str, payload: InquiryStatusUpdate):
    inquiry = await inquiry_service.update_inquiry_status(inquiry_id, payload.status)
    return {"success": True, "data": _inquiry_out(inquiry)}
