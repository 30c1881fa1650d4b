"""
Password hashing and session tokens for gym members
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import jwt
from passlib.context import CryptContext

from config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

ALGORITHM = "HS256"
# Also the auth cookie's max-age
TOKEN_TTL = timedelta(days=7)


def _signing_key(action: str) -> str:
    if not settings.jwt_secret_key:
        raise ValueError(f"JWT_SECRET_KEY is not set. Cannot {action} JWT token.")
    return settings.jwt_secret_key


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Accounts created without a password never verify."""
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def create_jwt(user_id: str, ttl: timedelta = TOKEN_TTL) -> str:
    """Sign a session token whose subject is the member's id."""
    expires_at = datetime.utcnow() + ttl
    return jwt.encode({"sub": user_id, "exp": expires_at}, _signing_key("create"), algorithm=ALGORITHM)


def decode_jwt(token: str) -> Optional[dict]:
    """Return the token's claims, or None when it is expired or fails verification."""
    key = _signing_key("decode")
    try:
        return jwt.decode(token, key, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired session token")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected session token: {e}")
    return None
