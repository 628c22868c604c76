from typing import Protocol

import httpx

from tourbook.config import get_settings
from tourbook.utils.logger import get_logger
from tourbook.utils.masking import mask_phone

logger = get_logger("sms")


class SmsError(RuntimeError):
    pass


class SmsSender(Protocol):
    async def send_sms(self, phone: str, message: str) -> None:  # pragma: no cover - interface
        ...


class LogSmsSender:
    """Dev implementation: nothing leaves the process, the message is only logged."""

    async def send_sms(self, phone: str, message: str) -> None:
        logger.info(f"[OTP SMS] {mask_phone(phone)} => {message}")


class TwilioSmsSender:
    """Send SMS through the Twilio Messages REST API."""

    def __init__(
        self,
        *,
        account_sid: str,
        auth_token: str,
        from_number: str,
        base_url: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def send_sms(self, phone: str, message: str) -> None:
        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        payload = {"To": phone, "From": self.from_number, "Body": message}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, data=payload, auth=(self.account_sid, self.auth_token))
            if resp.status_code >= 400:
                raise SmsError(f"Twilio error {resp.status_code}: {resp.text}")
        logger.debug(f"Twilio accepted SMS to {mask_phone(phone)}")


def get_sms_sender() -> SmsSender:
    settings = get_settings()
    provider = (settings.SMS_PROVIDER or "log").lower()
    if provider == "twilio":
        if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_FROM_NUMBER):
            raise SmsError(
                "Twilio configuration is missing (TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN/TWILIO_FROM_NUMBER)"
            )
        return TwilioSmsSender(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            from_number=settings.TWILIO_FROM_NUMBER,
            base_url=settings.TWILIO_BASE_URL,
            timeout=settings.OTP_DELIVERY_TIMEOUT_SECONDS,
        )
    if provider != "log":
        logger.warning(f"Unknown SMS_PROVIDER {provider!r}, falling back to log sender")
    return LogSmsSender()


def build_otp_sms(code: str, ttl_minutes: int) -> str:
    return f"Your verification code is: {code}. Valid for {ttl_minutes} minutes."
