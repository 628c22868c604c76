from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from tourbook.config import get_settings
from tourbook.errors import InvalidCredentials

ACCESS = "access"
REFRESH = "refresh"

# bcrypt hashes for users who registered with a password
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """OTP-only users have no hash and never match."""
    return bool(password_hash) and pwd_context.verify(password, password_hash)


# JWTs: HS256 signed with JWT_SECRET, "type" claim separates access from refresh


def jwt_configured() -> bool:
    return bool(get_settings().JWT_SECRET)


def _signing_key() -> str:
    key = get_settings().JWT_SECRET
    if not key:
        raise RuntimeError("JWT_SECRET is not configured")
    return key


def _encode(claims: dict, token_type: str, lifetime: timedelta) -> str:
    payload = {**claims, "type": token_type, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(payload, _signing_key(), algorithm=get_settings().JWT_ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=get_settings().ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, ACCESS, lifetime)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(days=get_settings().REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(data, REFRESH, lifetime)


def decode_token(token: str, token_type: str = ACCESS) -> dict:
    """Claims of a valid, unexpired token of the given type; InvalidCredentials otherwise."""
    try:
        claims = jwt.decode(token, _signing_key(), algorithms=[get_settings().JWT_ALGORITHM])
    except JWTError:
        raise InvalidCredentials("Invalid or expired token")
    if claims.get("type") != token_type:
        raise InvalidCredentials(f"Invalid token type. Expected {token_type}")
    return claims
