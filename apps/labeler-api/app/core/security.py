"""
Password hashing and bearer tokens for local annotator accounts.

Tokens carry the user id in `sub`. The role is looked up on every request,
so a role change takes effect without re-login.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> Tuple[bool, Optional[str]]:
    """Returns (ok, new_hash); new_hash is set when the stored hash is outdated."""
    return pwd_context.verify_and_update(password, password_hash)


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Raises JWTError when the signature or expiry is bad."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
