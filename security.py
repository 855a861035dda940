"""
Password hashing and signed session tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from config import settings

ALGORITHM = "HS256"

# compared against when the account does not exist, so lookups cost the same
DUMMY_HASH = bcrypt.hashpw(b"unused-password", bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def hash_password(password: str) -> str:
    """Generate a salted bcrypt hash."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        # not a bcrypt hash
        return False


def create_access_token(
    subject: str, role: str, user_id: int, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed token carrying the subject, role and an expiry."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": subject, "role": role, "user_id": user_id, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Return the token payload, or None when the signature or expiry is invalid."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
