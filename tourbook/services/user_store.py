"""
User persistence used by OTP provisioning and password login.

``UserStore`` is the narrow interface the OTP workflow depends on;
``BeanieUserStore`` is the MongoDB implementation.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from beanie import PydanticObjectId as OID
from beanie.operators import Or
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from tourbook.errors import DuplicateKey
from tourbook.models import User
from tourbook.utils.logger import get_logger

logger = get_logger("user_store")


@dataclass(frozen=True)
class NewUser:
    name: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    password_hash: Optional[str] = None


@dataclass(frozen=True)
class UserIdentity:
    id: str
    name: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    password_hash: Optional[str]
    created_at: Optional[datetime] = None


class UserStore(Protocol):
    async def find_by_phone_or_email(
        self, phone: Optional[str], email: Optional[str]
    ) -> Optional[UserIdentity]:  # pragma: no cover - interface
        ...

    async def find_by_email(self, email: str) -> Optional[UserIdentity]:  # pragma: no cover - interface
        ...

    async def get(self, user_id: str) -> Optional[UserIdentity]:  # pragma: no cover - interface
        ...

    async def create(self, data: NewUser) -> UserIdentity:  # pragma: no cover - interface
        """Raises DuplicateKey when phone or email is already taken."""
        ...


def _to_identity(user: User) -> UserIdentity:
    return UserIdentity(
        id=str(user.id),
        name=user.name,
        phone=user.phone,
        email=user.email,
        password_hash=user.password_hash,
        created_at=user.created_at,
    )


def duplicate_field(exc: DuplicateKeyError) -> Optional[str]:
    key_pattern = (exc.details or {}).get("keyPattern") or {}
    return next(iter(key_pattern), None)


class BeanieUserStore:
    async def find_by_phone_or_email(
        self, phone: Optional[str], email: Optional[str]
    ) -> Optional[UserIdentity]:
        conditions = []
        if phone:
            conditions.append(User.phone == phone)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return None
        user = await User.find_one(Or(*conditions))
        return _to_identity(user) if user else None

    async def find_by_email(self, email: str) -> Optional[UserIdentity]:
        user = await User.find_one(User.email == email)
        return _to_identity(user) if user else None

    async def get(self, user_id: str) -> Optional[UserIdentity]:
        try:
            user = await User.get(OID(user_id))
        except InvalidId:
            return None
        return _to_identity(user) if user else None

    async def create(self, data: NewUser) -> UserIdentity:
        user = User(
            name=data.name,
            phone=data.phone,
            email=data.email,
            password_hash=data.password_hash,
        )
        try:
            await user.insert()
        except DuplicateKeyError as e:
            field = duplicate_field(e)
            logger.warning(f"Duplicate user on insert (field={field})")
            raise DuplicateKey(field) from e
        return _to_identity(user)
