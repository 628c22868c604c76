"""
OTP issuance and verification.

Issue:
    normalize -> cooldown check -> generate code -> store record -> deliver.
    If delivery fails the record is rolled back and DeliveryFailed is raised,
    so the client can ask again right away instead of waiting out the TTL.

Verify:
    normalize -> fetch -> attempts check -> expiry check -> code check ->
    consume the record -> provision the user.
    The attempts check runs before the expiry check, which runs before the
    code comparison. The wrong attempt that reaches the limit deletes the
    record, so the next call gets NotFoundOrExpired.

Every read-modify-write of a record happens under ``store.lock(identifier)``.
"""

import asyncio
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from tourbook.constants import ExistingUserPolicy, IdentifierKind
from tourbook.errors import (
    AttemptsExhausted,
    CooldownActive,
    DeliveryFailed,
    Expired,
    InvalidCode,
    NotFoundOrExpired,
    RegistrationInvalid,
    UserAlreadyExists,
)
from tourbook.security import hash_password
from tourbook.services.delivery import DeliveryGateway
from tourbook.services.identifiers import (
    Identifier,
    normalize_email,
    normalize_identifier,
    normalize_phone,
)
from tourbook.services.otp_store import OtpRecord, OtpStore, PendingUserData
from tourbook.services.user_store import NewUser, UserIdentity, UserStore
from tourbook.utils.logger import get_logger
from tourbook.utils.masking import mask_identifier

logger = get_logger("otp")

OTP_MIN = 100_000
OTP_MAX = 999_999


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp_code() -> str:
    """Uniform over 100000-999999; randbelow has no modulo bias."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


@dataclass(frozen=True)
class RegistrationData:
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


@dataclass(frozen=True)
class IssueResult:
    identifier: Identifier
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class VerifyResult:
    user: UserIdentity
    is_new_user: bool


class OtpService:
    def __init__(
        self,
        *,
        store: OtpStore,
        gateway: DeliveryGateway,
        users: UserStore,
        ttl_seconds: int = 300,
        max_attempts: int = 3,
        default_country_code: str = "91",
        delivery_timeout: float = 10.0,
        existing_user_policy: ExistingUserPolicy | str = ExistingUserPolicy.REJECT,
        require_password: bool = False,
        clock: Callable[[], datetime] = utcnow,
        code_generator: Callable[[], str] = generate_otp_code,
    ):
        self.store = store
        self.gateway = gateway
        self.users = users
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_attempts = max_attempts
        self.default_country_code = default_country_code
        self.delivery_timeout = delivery_timeout
        self.existing_user_policy = ExistingUserPolicy(existing_user_policy)
        self.require_password = require_password
        self.clock = clock
        self.code_generator = code_generator

    # ---------------- Issuance ----------------

    def _normalize_pending(self, data: Optional[PendingUserData]) -> Optional[PendingUserData]:
        if data is None:
            return None
        return PendingUserData(
            name=(data.name or "").strip() or None,
            phone=normalize_phone(data.phone, self.default_country_code) if data.phone else None,
            email=normalize_email(data.email) if data.email else None,
        )

    async def issue(self, raw_identifier: str, associated_data: Optional[PendingUserData] = None) -> IssueResult:
        identifier = normalize_identifier(raw_identifier, self.default_country_code)
        pending = self._normalize_pending(associated_data)
        key = identifier.value

        async with self.store.lock(key):
            now = self.clock()
            existing = await self.store.get(key)
            if existing is not None and not existing.is_expired(now):
                retry_after = existing.seconds_remaining(now)
                logger.info(f"OTP cooldown active for {mask_identifier(key)} ({retry_after}s left)")
                raise CooldownActive(retry_after)

            record = OtpRecord(
                identifier=key,
                code=self.code_generator(),
                issued_at=now,
                expires_at=now + self.ttl,
                attempts=0,
                pending_user_data=pending,
            )
            await self.store.set(record)

        name = pending.name if pending else None
        if not await self._deliver(identifier, record.code, name):
            await self._rollback(record)
            raise DeliveryFailed()

        logger.info(f"OTP issued for {mask_identifier(key)} via {identifier.kind.value}")
        return IssueResult(identifier=identifier, code=record.code, expires_at=record.expires_at)

    async def _deliver(self, identifier: Identifier, code: str, name: Optional[str]) -> bool:
        try:
            return await asyncio.wait_for(
                self.gateway.send(identifier, code, name=name), timeout=self.delivery_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"OTP delivery to {mask_identifier(identifier.value)} timed out after {self.delivery_timeout}s"
            )
        except Exception:
            logger.exception(f"OTP delivery to {mask_identifier(identifier.value)} raised")
        return False

    async def _rollback(self, record: OtpRecord) -> None:
        # Only remove the record this call created.
        async with self.store.lock(record.identifier):
            current = await self.store.get(record.identifier)
            if current is not None and current.issued_at == record.issued_at and current.code == record.code:
                await self.store.delete(record.identifier)

    # ---------------- Verification ----------------

    def _normalize_registration(self, data: RegistrationData) -> RegistrationData:
        if self.require_password and not data.password:
            raise RegistrationInvalid("Password is required")
        return RegistrationData(
            name=(data.name or "").strip() or None,
            phone=normalize_phone(data.phone, self.default_country_code) if data.phone else None,
            email=normalize_email(data.email) if data.email else None,
            password=data.password or None,
        )

    async def verify(
        self,
        raw_identifier: str,
        submitted_code: str,
        registration: Optional[RegistrationData] = None,
    ) -> VerifyResult:
        identifier = normalize_identifier(raw_identifier, self.default_country_code)
        registration = self._normalize_registration(registration or RegistrationData())
        key = identifier.value

        async with self.store.lock(key):
            record = await self.store.get(key)
            if record is None:
                raise NotFoundOrExpired()

            if record.attempts >= self.max_attempts:
                await self.store.delete(key)
                raise AttemptsExhausted()

            if record.is_expired(self.clock()):
                await self.store.delete(key)
                raise Expired()

            if not secrets.compare_digest((submitted_code or "").strip(), record.code):
                failed = record.with_failed_attempt()
                attempts_left = max(self.max_attempts - failed.attempts, 0)
                if attempts_left == 0:
                    await self.store.delete(key)
                else:
                    await self.store.set(failed)
                logger.info(
                    f"Wrong OTP for {mask_identifier(key)} (attempt {failed.attempts}/{self.max_attempts})"
                )
                raise InvalidCode(attempts_left)

            # One-time use: consumed before provisioning so it cannot be replayed.
            await self.store.delete(key)

        logger.info(f"OTP verified for {mask_identifier(key)}")
        return await self._provision(identifier, record.pending_user_data, registration)

    # ---------------- Provisioning ----------------

    async def _provision(
        self,
        identifier: Identifier,
        pending: Optional[PendingUserData],
        registration: RegistrationData,
    ) -> VerifyResult:
        pending = pending or PendingUserData()
        name = registration.name or pending.name
        if identifier.kind == IdentifierKind.PHONE:
            phone = identifier.value
            email = registration.email or pending.email
        else:
            phone = registration.phone or pending.phone
            email = identifier.value

        existing = await self.users.find_by_phone_or_email(phone, email)
        if existing is not None:
            if self.existing_user_policy == ExistingUserPolicy.LOGIN:
                logger.info(f"Existing user {existing.id} logged in via OTP")
                return VerifyResult(user=existing, is_new_user=False)
            if email and existing.email == email:
                raise UserAlreadyExists("User with this email already exists")
            if phone and existing.phone == phone:
                raise UserAlreadyExists("User with this phone number already exists")
            raise UserAlreadyExists()

        password_hash = hash_password(registration.password) if registration.password else None
        user = await self.users.create(
            NewUser(name=name, phone=phone, email=email, password_hash=password_hash)
        )
        logger.info(f"User {user.id} registered via OTP")
        return VerifyResult(user=user, is_new_user=True)

    # ---------------- Housekeeping ----------------

    async def purge_expired(self) -> int:
        """Drop records already past expires_at. Optional; expiry is enforced on access anyway."""
        return await self.store.purge_expired(self.clock())
