from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from inspection_api.core.security import CredentialDirectory, decode_token
from inspection_api.core.settings import AppSettings
from inspection_api.services.capture import AudioRecorder, StreamedDeviceProvider
from inspection_api.services.catalog_store import CatalogStore
from inspection_api.services.inspection_store import InspectionStore
from inspection_api.services.products import ProductCatalog
from inspection_api.services.report_assembly import ReportAssembler
from inspection_api.services.summary import SummaryService

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# Stores and services are built once at startup and kept on app.state.

# PUBLIC_INTERFACE
def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


# PUBLIC_INTERFACE
def get_catalog_store(request: Request) -> CatalogStore:
    return request.app.state.catalog_store


# PUBLIC_INTERFACE
def get_inspection_store(request: Request) -> InspectionStore:
    return request.app.state.inspection_store


# PUBLIC_INTERFACE
def get_product_catalog(request: Request) -> ProductCatalog:
    return request.app.state.products


# PUBLIC_INTERFACE
def get_report_assembler(request: Request) -> ReportAssembler:
    return request.app.state.report_assembler


# PUBLIC_INTERFACE
def get_summary_service(request: Request) -> SummaryService:
    return request.app.state.summary_service


# PUBLIC_INTERFACE
def get_device_provider(request: Request) -> StreamedDeviceProvider:
    return request.app.state.devices


# PUBLIC_INTERFACE
def get_voice_recorder(request: Request) -> AudioRecorder:
    return request.app.state.voice_recorder


# PUBLIC_INTERFACE
def get_credentials(request: Request) -> CredentialDirectory:
    return request.app.state.credentials


# PUBLIC_INTERFACE
def get_current_user(
    token: str = Depends(oauth2_scheme),
    credentials: CredentialDirectory = Depends(get_credentials),
    settings: AppSettings = Depends(get_settings),
) -> str:
    """
    Resolve the signed-in email from the Authorization bearer token.

    Only access tokens are accepted, and the subject must still be one of the
    configured login accounts.
    """
    try:
        payload = decode_token(token, settings)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")

    email = payload.get("sub")
    if not email or email not in credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return email
