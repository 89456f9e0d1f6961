# roadit/core/config.py
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    .env file may contain:

    Optional (with defaults):
    - DATABASE_URL=sqlite:///./roadit.db (any SQLAlchemy URL)
    - ISSUES_STORAGE_KEY=roadit_issues
    - BACKEND_CORS_ORIGINS=http://localhost:9002,http://127.0.0.1:9002
    - GEMINI_MODEL=gemini-2.5-flash
    - REMOTE_TIMEOUT_SECONDS=20
    - SUPABASE_BUCKET=issue-photos
    - JWT_SECRET=your-secret-key-here
    - RATE_LIMIT_ENABLED=true
    - LOG_LEVEL=INFO

    Optional (no defaults - will be None if not set):
    - GEMINI_API_KEY=your-gemini-key (photo assessment)
    - GOOGLE_MAPS_API_KEY=your-maps-key (municipality lookup)
    - SUPABASE_URL=https://your-project.supabase.co
    - SUPABASE_SERVICE_ROLE=your-service-role-key
    - MUNICIPAL_ACCESS_CODE=shared-code-for-staff (status updates are open when unset)
    """
    database_url: str = Field(default="sqlite:///./roadit.db", alias="DATABASE_URL")
    issues_storage_key: str = Field(default="roadit_issues", alias="ISSUES_STORAGE_KEY")
    backend_cors_origins: str = Field(
        default="http://localhost:9002,http://127.0.0.1:9002",
        alias="BACKEND_CORS_ORIGINS",
    )

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    google_maps_api_key: Optional[str] = Field(default=None, alias="GOOGLE_MAPS_API_KEY")
    remote_timeout_seconds: float = Field(default=20.0, alias="REMOTE_TIMEOUT_SECONDS")

    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role: Optional[str] = Field(default=None, alias="SUPABASE_SERVICE_ROLE")
    supabase_bucket: str = Field(default="issue-photos", alias="SUPABASE_BUCKET")

    jwt_secret: str = Field(default="roadit-dev-secret", alias="JWT_SECRET")
    municipal_access_code: Optional[str] = Field(default=None, alias="MUNICIPAL_ACCESS_CODE")

    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AssessmentConfig(BaseModel):
    api_key: Optional[str] = None
    model: str = "gemini-2.5-flash"
    timeout: float = 20.0


class GeocodingConfig(BaseModel):
    api_key: Optional[str] = None
    endpoint: str = "https://maps.googleapis.com/maps/api/geocode/json"
    timeout: float = 20.0


def cors_origins_list() -> List[str]:
    raw = settings.backend_cors_origins or ""
    return [x.strip().rstrip("/") for x in raw.split(",") if x.strip()]


def assessment_config() -> AssessmentConfig:
    return AssessmentConfig(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout=settings.remote_timeout_seconds,
    )


def geocoding_config() -> GeocodingConfig:
    return GeocodingConfig(
        api_key=settings.google_maps_api_key,
        timeout=settings.remote_timeout_seconds,
    )

settings = Settings()
