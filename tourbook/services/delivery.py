from typing import Optional, Protocol

from tourbook.constants import IdentifierKind
from tourbook.services.identifiers import Identifier
from tourbook.services.mail_templates import render_otp_email
from tourbook.utils.logger import get_logger
from tourbook.utils.mailer import Mailer
from tourbook.utils.masking import mask_identifier
from tourbook.utils.sms import SmsSender, build_otp_sms

logger = get_logger("delivery")


class DeliveryGateway(Protocol):
    async def send(
        self, identifier: Identifier, code: str, *, name: Optional[str] = None
    ) -> bool:  # pragma: no cover - interface
        ...


class OtpDeliveryGateway:
    """Send an OTP by SMS or by email depending on the identifier kind.

    Never raises: provider errors are logged and reported as ``False``.
    No retry happens here; the client re-requests an OTP instead.
    """

    def __init__(self, *, sms: SmsSender, mailer: Mailer, ttl_seconds: int = 300):
        self.sms = sms
        self.mailer = mailer
        self.ttl_minutes = max(ttl_seconds // 60, 1)

    async def send(self, identifier: Identifier, code: str, *, name: Optional[str] = None) -> bool:
        """``name`` personalises the email greeting; SMS ignores it."""
        try:
            if identifier.kind == IdentifierKind.EMAIL:
                subject, text, html = render_otp_email(
                    name=name or "User", code=code, ttl_minutes=self.ttl_minutes
                )
                await self.mailer.send(to=identifier.value, subject=subject, text=text, html=html)
            else:
                await self.sms.send_sms(identifier.value, build_otp_sms(code, self.ttl_minutes))
        except Exception as e:
            logger.warning(
                f"OTP delivery to {mask_identifier(identifier.value)} failed: {type(e).__name__}: {e}"
            )
            return False
        return True
