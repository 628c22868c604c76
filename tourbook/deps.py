from functools import lru_cache

from tourbook.config import get_settings
from tourbook.services.delivery import OtpDeliveryGateway
from tourbook.services.otp_service import OtpService
from tourbook.services.otp_store import InMemoryOtpStore
from tourbook.services.user_store import BeanieUserStore, UserStore
from tourbook.utils.mailer import Mailer, get_mailer
from tourbook.utils.sms import get_sms_sender

# Common dependencies used across routers; tests swap them via app.dependency_overrides


@lru_cache()
def get_otp_store() -> InMemoryOtpStore:
    return InMemoryOtpStore()


def get_user_store() -> UserStore:
    return BeanieUserStore()


def get_email_sender() -> Mailer:
    return get_mailer()


@lru_cache()
def get_otp_service() -> OtpService:
    settings = get_settings()
    gateway = OtpDeliveryGateway(
        sms=get_sms_sender(),
        mailer=get_mailer(),
        ttl_seconds=settings.OTP_TTL_SECONDS,
    )
    return OtpService(
        store=get_otp_store(),
        gateway=gateway,
        users=get_user_store(),
        ttl_seconds=settings.OTP_TTL_SECONDS,
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        default_country_code=settings.OTP_DEFAULT_COUNTRY_CODE,
        delivery_timeout=settings.OTP_DELIVERY_TIMEOUT_SECONDS,
        existing_user_policy=settings.OTP_EXISTING_USER_POLICY,
        require_password=settings.OTP_REQUIRE_PASSWORD,
    )
