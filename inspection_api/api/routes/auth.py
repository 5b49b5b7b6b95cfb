from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError

from inspection_api.core.deps import get_credentials, get_current_user, get_settings
from inspection_api.core.security import (
    CredentialDirectory,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from inspection_api.core.settings import AppSettings
from inspection_api.schemas.auth import RefreshRequest, TokenPair, UserRead
from inspection_api.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _issue_tokens(email: str, settings: AppSettings) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(subject=email, settings=settings),
        refresh_token=create_refresh_token(subject=email, settings=settings),
    )


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description="Authenticate using OAuth2 password form (username = email) and receive access/refresh tokens.",
)
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    credentials: CredentialDirectory = Depends(get_credentials),
    settings: AppSettings = Depends(get_settings),
) -> TokenPair:
    """Check the fixed account list and issue tokens."""
    email = credentials.authenticate(form_data.username, form_data.password)
    if email is None:
        logger.info("Rejected login for %s", form_data.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    logger.info("Signed in %s", email)
    return _issue_tokens(email, settings)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new access token from a valid refresh token.",
)
async def refresh_token(
    payload: RefreshRequest,
    credentials: CredentialDirectory = Depends(get_credentials),
    settings: AppSettings = Depends(get_settings),
) -> TokenPair:
    """Validate refresh token and issue a new access token pair."""
    try:
        claims: Dict[str, Any] = decode_token(payload.refresh_token, settings)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    if claims.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")

    email = claims.get("sub")
    if not email or email not in credentials:
        raise HTTPException(status_code=401, detail="User not found")
    return _issue_tokens(email, settings)


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Stateless logout. Clients should discard tokens. No server state maintained.",
)
async def logout() -> MessageResponse:
    """Acknowledge logout in stateless JWT systems."""
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the signed-in account.",
)
async def read_current_user(email: str = Depends(get_current_user)) -> UserRead:
    return UserRead(email=email)
