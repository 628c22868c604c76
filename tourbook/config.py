from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    """Tourbook settings, read from the environment or a .env file.

    Secrets (JWT, Twilio, SMTP) have no usable defaults.
    """

    APP_NAME: str = "tourbook_api"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True

    MONGODB_URI: str = "mongodb://localhost:27017/tourbook"

    # JWT settings
    JWT_SECRET: str | None = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Raw CORS string from env (comma-separated); parsed via cors_origins property
    CORS_ORIGINS: str | None = None

    # OTP policy
    OTP_TTL_SECONDS: int = 300
    OTP_MAX_ATTEMPTS: int = 3
    OTP_DEFAULT_COUNTRY_CODE: str = "91"
    OTP_DELIVERY_TIMEOUT_SECONDS: float = 10.0
    # "reject": an existing user fails verification with UserAlreadyExists
    # "login": an existing user is logged in (isNewUser=false)
    OTP_EXISTING_USER_POLICY: str = "reject"
    OTP_REQUIRE_PASSWORD: bool = False
    # 0 disables the periodic sweep; expiry is always enforced on access
    OTP_SWEEP_INTERVAL_SECONDS: int = 60
    OTP_REQUEST_RATE_LIMIT: str = "3/15minutes"
    RATE_LIMIT_ENABLED: bool = True

    # SMS provider config (log | twilio)
    SMS_PROVIDER: str = "log"
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM_NUMBER: str | None = None
    TWILIO_BASE_URL: str = "https://api.twilio.com/2010-04-01"

    # SMTP config; email is only logged when SMTP_HOST is unset
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    EMAIL_FROM: str = "noreply@example.com"
    COMPANY_NAME: str = "Adventure Tours"
    BOOKING_PORTAL_URL: str = "https://example.com/bookings"
    SUPPORT_EMAIL: str = "support@example.com"

    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in (self.CORS_ORIGINS or "").split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return (self.APP_ENV or "").lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
