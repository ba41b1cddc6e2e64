import re
import secrets
import uuid
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from passlib.context import CryptContext

from .core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).{8,}$")


# =========================
# Time
# =========================
def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =========================
# OTP Generation
# =========================
def generate_otp(length: Optional[int] = None) -> str:
    """Generate a numeric one-time code using the secrets module."""
    length = length or settings.OTP_LENGTH
    return "".join(secrets.choice("0123456789") for _ in range(length))


# =========================
# Passwords
# =========================
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False


def is_strong_password(password: str) -> bool:
    return bool(PASSWORD_RE.match(password or ""))


# =========================
# JWT Token Handling
# =========================
def _encode(data: Dict[str, Any], token_type: str, expires: timedelta) -> str:
    to_encode = data.copy()
    expire = utc_now() + expires
    to_encode.update({"exp": expire, "type": token_type, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    """Create JWT access token"""
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode(data, "access", timedelta(minutes=minutes))


def create_refresh_token(data: Dict[str, Any], days: Optional[int] = None) -> str:
    """Create JWT refresh token"""
    return _encode(data, "refresh", timedelta(days=days or settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def verify_access_token(token: str) -> Optional[Dict[str, Any]]:
    payload = decode_jwt_token(token)
    if payload and payload.get("type") == "access":
        return payload
    return None


def verify_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify refresh token specifically"""
    payload = decode_jwt_token(token)
    if payload and payload.get("type") == "refresh":
        return payload
    return None


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
