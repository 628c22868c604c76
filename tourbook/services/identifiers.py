import re
from dataclasses import dataclass

from tourbook.constants import IdentifierKind
from tourbook.errors import InvalidIdentifier

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NON_DIGITS_RE = re.compile(r"\D")


@dataclass(frozen=True)
class Identifier:
    """Normalized OTP key: an E.164-style phone or a lowercased email."""

    kind: IdentifierKind
    value: str

    def __str__(self) -> str:
        return self.value


def normalize_phone(phone: str, default_country_code: str = "91") -> str:
    """
    Normalize a phone number:
    - strip everything that is not a digit
    - 10 digits -> +<country code><digits>
    - 12 digits starting with the country code -> +<digits>
    - more than 10 digits -> +<digits>
    Raises InvalidIdentifier for anything else.
    """
    cleaned = _NON_DIGITS_RE.sub("", f"{phone or ''}")
    if len(cleaned) == 10:
        return f"+{default_country_code}{cleaned}"
    if len(cleaned) == 12 and cleaned.startswith(default_country_code):
        return f"+{cleaned}"
    if len(cleaned) > 10:
        return f"+{cleaned}"
    raise InvalidIdentifier(
        "Invalid phone number format. Please use 10-digit number or international format"
    )


def normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    if not _EMAIL_RE.match(normalized):
        raise InvalidIdentifier("Invalid email format")
    return normalized


def normalize_identifier(raw: str, default_country_code: str = "91") -> Identifier:
    """Anything containing '@' is treated as an email, everything else as a phone."""
    if "@" in (raw or ""):
        return Identifier(IdentifierKind.EMAIL, normalize_email(raw))
    return Identifier(IdentifierKind.PHONE, normalize_phone(raw, default_country_code))
