from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime, timezone

from tourbook.constants import InquiryStatus


class Inquiry(Document):
    """Contact/booking inquiry left by a visitor."""
    name: str
    email: str
    phone: str | None = None
    message: str
    package: str | None = None
    status: Indexed(str) = InquiryStatus.NEW.value
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "inquiries"
