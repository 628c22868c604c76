"""Shared test fixtures for the tourbook API."""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

# Configure the app before anything under tourbook is imported
os.environ["APP_ENV"] = "test"
os.environ["APP_DEBUG"] = "false"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OTP_SWEEP_INTERVAL_SECONDS"] = "0"
os.environ["SMS_PROVIDER"] = "log"
os.environ.pop("SMTP_HOST", None)
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "tourbook-test-logs")

from tourbook.config import get_settings  # noqa: E402

get_settings.cache_clear()

from tourbook.errors import DuplicateKey  # noqa: E402
from tourbook.services.identifiers import Identifier  # noqa: E402
from tourbook.services.otp_service import OtpService  # noqa: E402
from tourbook.services.otp_store import InMemoryOtpStore  # noqa: E402
from tourbook.services.user_store import NewUser, UserIdentity  # noqa: E402


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingGateway:
    """Delivery gateway that remembers what it was asked to send."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: list[tuple[Identifier, str]] = []
        self.names: list[Optional[str]] = []

    async def send(self, identifier: Identifier, code: str, *, name: Optional[str] = None) -> bool:
        self.sent.append((identifier, code))
        self.names.append(name)
        return self.succeed

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


class InMemoryUserStore:
    def __init__(self):
        self.users: dict[str, UserIdentity] = {}

    async def find_by_phone_or_email(self, phone, email):
        for user in self.users.values():
            if (phone and user.phone == phone) or (email and user.email == email):
                return user
        return None

    async def find_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def get(self, user_id):
        return self.users.get(user_id)

    async def create(self, data: NewUser) -> UserIdentity:
        for user in self.users.values():
            if data.phone and user.phone == data.phone:
                raise DuplicateKey("phone")
            if data.email and user.email == data.email:
                raise DuplicateKey("email")
        user = UserIdentity(
            id=f"user-{len(self.users) + 1}",
            name=data.name,
            phone=data.phone,
            email=data.email,
            password_hash=data.password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self.users[user.id] = user
        return user


class RecordingMailer:
    def __init__(self):
        self.outbox: list[dict] = []

    async def send(self, *, to, subject, text, html=None) -> str:
        self.outbox.append({"to": to, "subject": subject, "text": text, "html": html})
        return f"<msg-{len(self.outbox)}@test>"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def users():
    return InMemoryUserStore()


@pytest.fixture
def store():
    return InMemoryOtpStore()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def make_service(store, gateway, users, clock):
    def _make(**overrides) -> OtpService:
        kwargs = dict(
            store=store,
            gateway=gateway,
            users=users,
            ttl_seconds=300,
            max_attempts=3,
            default_country_code="91",
            delivery_timeout=1.0,
            clock=clock,
        )
        kwargs.update(overrides)
        return OtpService(**kwargs)

    return _make


@pytest.fixture
def otp_service(make_service):
    return make_service()


@pytest.fixture
def client(otp_service, users, mailer):
    from fastapi.testclient import TestClient

    from tourbook.deps import get_email_sender, get_otp_service, get_user_store
    from tourbook.main import app

    app.dependency_overrides[get_otp_service] = lambda: otp_service
    app.dependency_overrides[get_user_store] = lambda: users
    app.dependency_overrides[get_email_sender] = lambda: mailer
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
async def mongo_db():
    """Beanie documents bound to a fresh in-memory MongoDB."""
    from beanie import init_beanie
    from mongomock_motor import AsyncMongoMockClient

    from tourbook.models import Inquiry, TourPackage, User

    db = AsyncMongoMockClient()["tourbook_test"]
    await init_beanie(database=db, document_models=[User, TourPackage, Inquiry])
    return db
