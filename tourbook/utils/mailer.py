import asyncio
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional, Protocol

from tourbook.config import get_settings
from tourbook.utils.logger import get_logger
from tourbook.utils.masking import mask_email

logger = get_logger("mailer")


class EmailSendError(RuntimeError):
    pass


class Mailer(Protocol):
    async def send(
        self, *, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> str:  # pragma: no cover - interface
        ...


def build_message(
    *, sender: str, to: str, subject: str, text: str, html: Optional[str] = None
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg["Message-ID"] = make_msgid()
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


class LogMailer:
    """Used when SMTP is not configured: the email is logged, not sent."""

    def __init__(self, sender: str):
        self.sender = sender

    async def send(self, *, to: str, subject: str, text: str, html: Optional[str] = None) -> str:
        msg = build_message(sender=self.sender, to=to, subject=subject, text=text, html=html)
        logger.info(f"[EMAIL] {mask_email(to)} subject={subject!r}")
        return msg["Message-ID"]


class SmtpMailer:
    """Blocking smtplib delivery pushed onto a worker thread."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.ehlo()
            if self.use_tls:
                server.starttls()
                server.ehlo()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, *, to: str, subject: str, text: str, html: Optional[str] = None) -> str:
        msg = build_message(sender=self.sender, to=to, subject=subject, text=text, html=html)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailSendError(f"SMTP delivery to {mask_email(to)} failed: {e}") from e
        logger.info(f"Email sent to {mask_email(to)} subject={subject!r}")
        return msg["Message-ID"]


def get_mailer() -> Mailer:
    settings = get_settings()
    sender = formataddr((settings.COMPANY_NAME, settings.EMAIL_FROM))
    if not settings.SMTP_HOST:
        return LogMailer(sender)
    return SmtpMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        sender=sender,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        timeout=settings.OTP_DELIVERY_TIMEOUT_SECONDS,
    )
