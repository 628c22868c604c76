from beanie import Document
from pydantic import Field
from pymongo import ASCENDING, IndexModel
from datetime import datetime, timezone


class User(Document):
    """Registered customer. Created only after a successful OTP verification.

    phone and email are each unique when present; the partial indexes let
    users exist without one of them.
    """

    name: str | None = None
    phone: str | None = None
    email: str | None = None
    password_hash: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"
        indexes = [
            IndexModel(
                [("phone", ASCENDING)],
                unique=True,
                partialFilterExpression={"phone": {"$type": "string"}},
            ),
            IndexModel(
                [("email", ASCENDING)],
                unique=True,
                partialFilterExpression={"email": {"$type": "string"}},
            ),
        ]
