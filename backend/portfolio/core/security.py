from datetime import datetime, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from portfolio.core.config import settings

ADMIN_ROLE = "admin"
USER_ROLE = "user"

# CryptContext handles password hashing using bcrypt
# bcrypt salts every hash, so the same password produces different hashes
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def role_for_username(username: str) -> str:
    """Role granted at registration"""
    return ADMIN_ROLE if username == settings.ADMIN_USERNAME else USER_ROLE


def is_admin(user) -> bool:
    """Authorization policy for the admin dashboard"""
    return user is not None and user.role == ADMIN_ROLE


def create_session_cookie(token: str, expires_at: datetime) -> str:
    """Sign a session token for the cookie"""
    # exp lets jose reject stale cookies even if the store still has the entry
    payload = {"sid": token, "exp": expires_at}
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=settings.ALGORITHM)


def decode_session_cookie(cookie: str) -> Optional[str]:
    """Return the session token from a signed cookie, or None if invalid, expired or tampered"""
    try:
        payload = jwt.decode(cookie, settings.SESSION_SECRET,
                             algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    token = payload.get("sid")
    return token if isinstance(token, str) else None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
