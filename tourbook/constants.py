from enum import Enum


class IdentifierKind(str, Enum):
    """What an OTP identifier points at."""
    PHONE = "phone"
    EMAIL = "email"


class ExistingUserPolicy(str, Enum):
    """What a successful verification does when the user already exists."""
    REJECT = "reject"  # registration flow: UserAlreadyExists
    LOGIN = "login"    # identity-check flow: log the existing user in


class InquiryStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
