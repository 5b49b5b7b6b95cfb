from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from jose import jwt
from passlib.context import CryptContext

from inspection_api.core.settings import AppSettings, get_app_settings

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return _pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    """Hash a password using PBKDF2-SHA256."""
    return _pwd_context.hash(password)


class CredentialDirectory:
    """
    Fixed list of login accounts.

    Passwords from settings are hashed once at construction so plain text does
    not stay in memory alongside the running app.
    """

    def __init__(self, accounts: Mapping[str, str]) -> None:
        self._hashes = {
            email.strip().lower(): get_password_hash(password)
            for email, password in accounts.items()
        }

    def authenticate(self, email: str, password: str) -> Optional[str]:
        """Return the normalized email when the credentials match, else None."""
        key = email.strip().lower()
        hashed = self._hashes.get(key)
        if hashed is None or not verify_password(password, hashed):
            return None
        return key

    def __contains__(self, email: object) -> bool:
        return isinstance(email, str) and email.strip().lower() in self._hashes


def _create_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta],
    token_type: str,
    settings: AppSettings,
) -> str:
    to_encode = data.copy()
    now = datetime.now(tz=timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire, "iat": now, "type": token_type})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def create_access_token(
    subject: str,
    settings: Optional[AppSettings] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token whose subject is the login email."""
    settings = settings or get_app_settings()
    exp = timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token({"sub": subject}, exp, token_type="access", settings=settings)


# PUBLIC_INTERFACE
def create_refresh_token(
    subject: str,
    settings: Optional[AppSettings] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed refresh token for the login email."""
    settings = settings or get_app_settings()
    exp = timedelta(minutes=expires_minutes or settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    return _create_token({"sub": subject}, exp, token_type="refresh", settings=settings)


# PUBLIC_INTERFACE
def decode_token(token: str, settings: Optional[AppSettings] = None) -> Dict[str, Any]:
    """
    Decode and validate a JWT; raises JWTError if invalid/expired.

    The API passes the settings the app was created with; without them the
    environment is read.
    """
    settings = settings or get_app_settings()
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
