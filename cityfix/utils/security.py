import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from cityfix.config import settings
from cityfix.exceptions import AuthError


# ==========================
# AUTH CONFIG
# ==========================

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ==========================
# PASSWORD UTILS
# ==========================

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_truncate(plain_password), hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(_truncate(password))


def _truncate(password: str) -> str:
    """Bcrypt max input length = 72 bytes"""
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        return password_bytes[:72].decode("utf-8", errors="ignore")
    return password


# ==========================
# JWT TOKEN
# ==========================

def create_token(
    data: Dict[str, Any],
    token_type: str,
    expires_delta: timedelta,
) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({
        "type": token_type,
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + expires_delta,
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return create_token(
        data,
        "access",
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return create_token(
        data,
        "refresh",
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, token_type: str) -> Dict[str, Any]:
    """Decode a signed token and check its type; raises AuthError otherwise."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise AuthError("Invalid token") from exc
    if payload.get("type") != token_type:
        raise AuthError("Invalid token")
    return payload


# ==========================
# AUTH HELPERS
# ==========================

def get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Second part of an ``Authorization: Bearer <token>`` header, if any."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]
