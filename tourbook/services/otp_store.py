"""
OTP record storage.

The store is a keyed map from normalized identifier to ``OtpRecord``. It does
no policy work of its own: expiry and attempt limits are enforced by
``OtpService``, which wraps every read-modify-write of a record in
``store.lock(identifier)``.
"""

import asyncio
import math
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from typing import AsyncIterator, Optional, Protocol

from tourbook.utils.logger import get_logger

logger = get_logger("otp_store")


@dataclass(frozen=True)
class PendingUserData:
    """Name/phone/email captured when the OTP was requested."""

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class OtpRecord:
    identifier: str
    code: str
    issued_at: datetime
    expires_at: datetime
    attempts: int = 0
    pending_user_data: Optional[PendingUserData] = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def seconds_remaining(self, now: datetime) -> int:
        return max(math.ceil((self.expires_at - now).total_seconds()), 0)

    def with_failed_attempt(self) -> "OtpRecord":
        return replace(self, attempts=self.attempts + 1)


class OtpStore(Protocol):
    def lock(self, identifier: str):  # pragma: no cover - interface
        """Async context manager serializing access to one identifier."""
        ...

    async def get(self, identifier: str) -> Optional[OtpRecord]:  # pragma: no cover - interface
        ...

    async def set(self, record: OtpRecord) -> None:  # pragma: no cover - interface
        ...

    async def delete(self, identifier: str) -> None:  # pragma: no cover - interface
        ...

    async def purge_expired(self, now: datetime) -> int:  # pragma: no cover - interface
        ...


class InMemoryOtpStore:
    """Process-local store guarded by one asyncio.Lock per identifier.

    Locks live in a WeakValueDictionary so that an identifier's lock disappears
    once nobody holds or waits on it.
    """

    def __init__(self) -> None:
        self._records: dict[str, OtpRecord] = {}
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    @asynccontextmanager
    async def lock(self, identifier: str) -> AsyncIterator[None]:
        lock = self._locks.get(identifier)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[identifier] = lock
        async with lock:
            yield

    async def get(self, identifier: str) -> Optional[OtpRecord]:
        return self._records.get(identifier)

    async def set(self, record: OtpRecord) -> None:
        self._records[record.identifier] = record

    async def delete(self, identifier: str) -> None:
        self._records.pop(identifier, None)

    async def purge_expired(self, now: datetime) -> int:
        removed = 0
        for identifier in list(self._records):
            async with self.lock(identifier):
                record = self._records.get(identifier)
                if record is not None and record.is_expired(now):
                    del self._records[identifier]
                    removed += 1
        if removed:
            logger.debug(f"Purged {removed} expired OTP record(s)")
        return removed

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records
