import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from sixloans.core.config import settings

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def is_valid_password(password: Optional[str]) -> bool:
    return len(password or "") >= MIN_PASSWORD_LENGTH


# bcrypt hash of a password that passed the length policy
def hash_password(password: str) -> str:
    if not is_valid_password(password):
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    try:
        return pwd_context.hash(password)
    except (ValueError, TypeError) as e:
        raise ValueError("Could not hash password") from e


# Malformed or legacy hashes count as a mismatch
def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.warning("Stored password hash could not be checked: %s", e)
        return False


def token_claims_for(user) -> Dict[str, Any]:
    """Claims identifying a user session: id, email, role and token version."""
    return {
        "sub": str(user.id),
        "email": user.email,
        "role": getattr(user.role, "value", user.role),
        "ver": user.token_version or 0,
    }


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``claims`` into a bearer token.

    Each token gets its own ``jti`` so a single session can be revoked
    without touching the user's other sessions.
    """
    if not settings.JWT_SECRET_KEY:
        raise ValueError("JWT_SECRET_KEY is not configured")
    lifetime = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        **claims,
        "exp": datetime.now(timezone.utc) + lifetime,
        "jti": uuid.uuid4().hex,
    }
    try:
        return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    except JWTError as e:
        raise ValueError("Could not sign access token") from e


# None for anything that is not a live token signed with our key
def decode_token(token: str) -> Optional[Dict[str, Any]]:
    if not (settings.JWT_SECRET_KEY and token):
        return None
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug("Rejected token: %s", e)
        return None


def token_expiry(payload: Dict[str, Any]) -> datetime:
    exp = payload.get("exp")
    if exp is None:
        return datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    return datetime.fromtimestamp(exp, tz=timezone.utc)
