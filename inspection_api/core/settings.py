from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from inspection_api.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="InspectAI QA API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for the InspectAI quality-assurance tracker. "
            "Manages the checkpoint catalog, inspection reports and AI-written summaries."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    SEED_DEMO_DATA: bool = Field(
        default=True,
        description="If true, stores with no persisted state start from the demo dataset.",
    )

    # Persistence
    STORAGE_BACKEND: str = Field(
        default="database",
        description="Where store snapshots are kept: 'database' or 'memory'.",
    )
    INSPECTION_STORAGE_KEY: str = Field(default="inspection-store")
    CATALOG_STORAGE_KEY: str = Field(default="catalog-store")

    # Auth (fixed credential check, not a security boundary)
    JWT_SECRET_KEY: str = Field(default="change-me-inspectai")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)
    LOGIN_ACCOUNTS: Dict[str, str] = Field(
        default_factory=lambda: {
            "admin@inspectai.com": "admin123",
            "sourcebynet@gmail.com": "sourcebynet@999",
        },
        description="JSON object mapping login email to password.",
    )

    # Inspector stamped on newly built inspections
    INSPECTOR_NAME: str = Field(default="Jane Doe")
    INSPECTOR_AVATAR: str = Field(default="user-avatar-1")

    # Media capture posted by the browser (microphone, camera)
    CAPTURE_DEVICES: List[str] = Field(
        default_factory=lambda: ["microphone", "camera"],
        description="Devices the browser may stream to the API; others are reported as denied.",
    )

    # Generation service
    GEMINI_API_KEY: Optional[str] = Field(
        default=None, description="API key for the Google GenAI service."
    )
    GENERATION_MODEL: str = Field(default="gemini-2.5-flash")
    TRANSCRIPTION_MODEL: str = Field(default="gemini-2.5-pro")
    TTS_MODEL: str = Field(default="gemini-2.5-flash-preview-tts")
    TTS_VOICE: str = Field(default="Algenib")

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]

    @field_validator("CAPTURE_DEVICES", mode="before")
    @classmethod
    def _parse_capture_devices(cls, v):
        """Accept a JSON array or a comma-separated list; an empty value disables capture."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [p.strip() for p in v.split(",") if p.strip()]
        unknown = [d for d in v if d not in ("microphone", "camera")]
        if unknown:
            raise ValueError(f"Unknown capture devices: {unknown}")
        return v

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def _check_storage_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("database", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'database' or 'memory'")
        return v


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Note:
      For simplicity we construct a new instance each time. The application
      keeps the instance it was built with on app.state.settings.
    """
    return AppSettings()
