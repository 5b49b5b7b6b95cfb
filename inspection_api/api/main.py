from __future__ import annotations

import datetime as dt
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inspection_api.core.deps import get_current_user
from inspection_api.core.errors import InspectionAppError
from inspection_api.core.logging import configure_logging, correlation_id_var
from inspection_api.core.security import CredentialDirectory
from inspection_api.core.settings import AppSettings, get_app_settings
from inspection_api.db.run_migrations import main as run_alembic
from inspection_api.db.seed import demo_catalog, demo_inspections, demo_products
from inspection_api.db.session import get_session_factory
from inspection_api.schemas.common import ErrorInfo, ErrorResponse, MessageResponse
from inspection_api.schemas.inspection import Inspector
from inspection_api.services.capture import AudioRecorder, DeviceKind, StreamedDeviceProvider
from inspection_api.services.catalog_store import CatalogStore
from inspection_api.services.generation import GeminiGenerationClient, GenerationClient
from inspection_api.services.ids import IdGenerator, UuidIdGenerator
from inspection_api.services.inspection_store import InspectionStore
from inspection_api.services.products import ProductCatalog
from inspection_api.services.report_assembly import ReportAssembler
from inspection_api.services.storage import BlobStorage, DatabaseBlobStorage, MemoryBlobStorage
from inspection_api.services.summary import SummaryService

# Routers
from inspection_api.api.routes.ai import router as ai_router
from inspection_api.api.routes.auth import router as auth_router
from inspection_api.api.routes.capture import router as capture_router
from inspection_api.api.routes.catalog import router as catalog_router
from inspection_api.api.routes.checkpoints import router as checkpoints_router
from inspection_api.api.routes.inspections import router as inspections_router
from inspection_api.api.routes.reports import router as reports_router

# Configure structured logging once at import
configure_logging()
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "Auth", "description": "Authentication and token endpoints."},
    {"name": "Checkpoints", "description": "Catalog of reusable inspection checkpoints."},
    {"name": "Catalog", "description": "Products, clients, product categories and sample purposes."},
    {"name": "Inspections", "description": "Inspection reports and their answers."},
    {"name": "AI", "description": "Summaries, tag suggestions, transcription and speech."},
    {"name": "Capture", "description": "Voice notes recorded in the browser and streamed to the API."},
    {"name": "Reports", "description": "Exportable inspection reports (CSV/Excel/PDF)."},
]


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InspectionAppError)
    async def app_error_handler(request: Request, exc: InspectionAppError):
        """
        Render domain errors (validation, not found, completed inspection,
        generation and device failures) with their own status and type.
        """
        if exc.status_code >= 500:
            logger.warning("%s: %s", exc.error_type, exc.message)
        return _build_error_response(
            request=request,
            status_code=exc.status_code,
            error_type=exc.error_type,
            message=exc.message,
            details=jsonable_encoder(exc.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Global handler for HTTPException to produce a standardized error envelope.
        """
        detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
        return _build_error_response(
            request=request,
            status_code=exc.status_code,
            error_type="http_error",
            message=str(detail),
            details=None if isinstance(exc.detail, str) else exc.detail,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Global handler for request validation errors with a standard structure.
        """
        # ctx may hold the raised exception object, which is not JSON serializable
        errors = [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
        return _build_error_response(
            request=request,
            status_code=422,
            error_type="validation_error",
            message="Request validation failed",
            details=jsonable_encoder(errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """
        Catch-all handler to avoid leaking stack traces and to return a structured error.
        """
        logger.exception("Unhandled error processing request")
        return _build_error_response(
            request=request,
            status_code=500,
            error_type="internal_error",
            message="An unexpected error occurred",
            details=None,
        )


def _open_storage(settings: AppSettings) -> BlobStorage:
    if settings.STORAGE_BACKEND == "memory":
        logger.info("Using in-memory storage; nothing will survive a restart")
        return MemoryBlobStorage()

    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            run_alembic(["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            # Loading the stores below reports the database problem if it persists.
            logger.exception("Migration step failed: %s", exc)
    return DatabaseBlobStorage(get_session_factory())


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[AppSettings] = None,
    *,
    storage: Optional[BlobStorage] = None,
    generation_client: Optional[GenerationClient] = None,
    id_generator: Optional[IdGenerator] = None,
    today: Callable[[], dt.date] = dt.date.today,
) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters:
        settings: application settings; read from the environment when omitted.
        storage: blob storage for the stores; chosen from STORAGE_BACKEND when omitted.
        generation_client: client for the generation service; Google GenAI when omitted.
        id_generator: id source for new checkpoints, inspections and custom checkpoints.
        today: clock used to date new inspections.
    Returns:
        FastAPI: app whose stores are created on startup and kept on app.state.
    """
    settings = settings or get_app_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings

    # CORS - avoid wildcard with credentials
    cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
        logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
        cors_allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=cors_allow_credentials,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """
        Enrich request context with correlation_id for logging and error responses.
        Adds 'X-Correlation-ID' to every response.
        """
        corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
        token_corr = correlation_id_var.set(corr)
        request.state.correlation_id = corr

        logger.info("Incoming request %s %s", request.method, request.url.path)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token_corr)

        response.headers["X-Correlation-ID"] = corr
        return response

    _register_error_handlers(app)

    @app.on_event("startup")
    async def on_startup() -> None:
        """
        Open storage (running migrations first when configured) and load the stores.

        Stores with nothing persisted start from the demo data when SEED_DEMO_DATA is set.
        """
        blob_storage = storage if storage is not None else _open_storage(settings)
        ids = id_generator or UuidIdGenerator()

        catalog = CatalogStore(
            blob_storage,
            id_generator=ids,
            storage_key=settings.CATALOG_STORAGE_KEY,
            seed=demo_catalog() if settings.SEED_DEMO_DATA else None,
        )
        inspections = InspectionStore(
            blob_storage,
            storage_key=settings.INSPECTION_STORAGE_KEY,
            seed=demo_inspections() if settings.SEED_DEMO_DATA else (),
        )
        products = ProductCatalog(demo_products())

        app.state.catalog_store = catalog
        app.state.inspection_store = inspections
        app.state.products = products
        app.state.report_assembler = ReportAssembler(
            catalog,
            products,
            id_generator=ids,
            inspector=Inspector(name=settings.INSPECTOR_NAME, avatar=settings.INSPECTOR_AVATAR),
            today=today,
        )
        app.state.summary_service = SummaryService(
            generation_client or GeminiGenerationClient(api_key=settings.GEMINI_API_KEY),
            generation_model=settings.GENERATION_MODEL,
            transcription_model=settings.TRANSCRIPTION_MODEL,
            tts_model=settings.TTS_MODEL,
            tts_voice=settings.TTS_VOICE,
        )
        app.state.credentials = CredentialDirectory(settings.LOGIN_ACCOUNTS)
        devices = StreamedDeviceProvider(DeviceKind(kind) for kind in settings.CAPTURE_DEVICES)
        app.state.devices = devices
        app.state.voice_recorder = AudioRecorder(devices)
        logger.info(
            "Loaded %d checkpoints and %d inspections",
            len(catalog.list_checkpoints()),
            len(inspections.list_inspections()),
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        """Release the microphone if a voice note is still being recorded."""
        recorder = getattr(app.state, "voice_recorder", None)
        if recorder is not None and recorder.recording:
            logger.info("Discarding unfinished voice note on shutdown")
            recorder.cancel()

    # Build API v1 router and include sub-routers
    api_v1 = APIRouter(prefix="/api/v1")

    # PUBLIC_INTERFACE
    @api_v1.get(
        "/health",
        response_model=MessageResponse,
        summary="Health Check",
        tags=["Health"],
    )
    def health_check() -> MessageResponse:
        """
        Basic liveness health check endpoint.

        Returns:
            MessageResponse: Simple confirmation that the service is running.
        """
        return MessageResponse(message="Healthy")

    signed_in = [Depends(get_current_user)]
    api_v1.include_router(auth_router)
    api_v1.include_router(checkpoints_router, dependencies=signed_in)
    api_v1.include_router(catalog_router, dependencies=signed_in)
    api_v1.include_router(inspections_router, dependencies=signed_in)
    api_v1.include_router(ai_router, dependencies=signed_in)
    api_v1.include_router(capture_router, dependencies=signed_in)
    api_v1.include_router(reports_router, dependencies=signed_in)

    # Attach api_v1 to app
    app.include_router(api_v1)
    return app


app = create_app()
