from typing import Optional

from tourbook.errors import InvalidCredentials, InvalidIdentifier
from tourbook.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    jwt_configured,
    verify_password,
)
from tourbook.services.identifiers import normalize_email
from tourbook.services.user_store import UserIdentity, UserStore
from tourbook.utils.logger import get_logger

logger = get_logger("auth")


def issue_tokens(user: UserIdentity) -> tuple[str, str]:
    """Return (access_token, refresh_token) for the user."""
    token_data = {"sub": user.id}
    return create_access_token(token_data), create_refresh_token(token_data)


def try_issue_tokens(user: UserIdentity) -> Optional[tuple[str, str]]:
    """Like issue_tokens, but returns None when JWT_SECRET is not configured."""
    if not jwt_configured():
        logger.warning("JWT_SECRET not configured; responding without tokens")
        return None
    return issue_tokens(user)


async def login_with_password(
    users: UserStore, *, email: str, password: str
) -> tuple[tuple[str, str], UserIdentity]:
    """Email + password login. Returns ((access_token, refresh_token), user)."""
    if not (email or "").strip() or not password:
        raise InvalidCredentials("Please provide email and password")
    try:
        email = normalize_email(email)
    except InvalidIdentifier:
        raise InvalidCredentials()

    user = await users.find_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Password login rejected")
        raise InvalidCredentials()

    return issue_tokens(user), user


async def refresh_access_token(users: UserStore, refresh_token: str) -> tuple[str, str]:
    payload = decode_token(refresh_token, token_type="refresh")
    user_id: str | None = payload.get("sub")
    if not user_id:
        raise InvalidCredentials("Invalid refresh token")
    user = await users.get(user_id)
    if not user:
        raise InvalidCredentials("User not found")
    return issue_tokens(user)
