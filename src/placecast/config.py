"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PLACECAST_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Placecast Notification API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level for the API and workers.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=("http://localhost:5173", "http://127.0.0.1:5173"),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=10.0, gt=0.0)
    http_user_agent: str = "Placecast/1.0"
    http_max_retries: int = Field(default=1, ge=0)
    http_backoff_seconds: float = Field(default=0.5, ge=0.0)

    # Reverse geocoding
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    geocoding_language: str = "es"
    city_placeholder: str = "current location"

    # Points of interest
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    search_radius_m: int = Field(default=5000, ge=1)
    max_live_candidates: int = Field(default=10, ge=1)

    # Routing
    osrm_base_url: Optional[str] = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service.",
    )
    osrm_profile: Literal["driving", "foot", "bike"] = Field(
        default="foot",
        description="OSRM profile used for travel estimates.",
    )
    estimate_min_minutes: int = Field(default=5, ge=1)
    estimate_max_minutes: int = Field(default=25, ge=1)

    # Delivery queues
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: Optional[str] = "redis://localhost:6379/1"
    redis_url: str = "redis://localhost:6379/2"
    email_queue: str = "email-queue"
    sms_queue: str = "sms-queue"
    delivery_max_attempts: int = Field(default=3, ge=1)
    delivery_backoff_seconds: int = Field(default=1, ge=1)
    delivery_backoff_max_seconds: int = Field(default=60, ge=1)
    history_completed_limit: int = Field(default=20, ge=0)
    history_failed_limit: int = Field(default=50, ge=0)

    # Email (Resend)
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "Placecast <notifications@placecast.app>"
    map_base_url: str = "https://www.openstreetmap.org/"

    # SMS (Twilio)
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None
    sms_default_country_code: str = "+57"
    sms_max_length: int = Field(default=160, ge=10)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("estimate_max_minutes")
    @classmethod
    def _check_estimate_range(cls, value: int, info) -> int:
        minimum = info.data.get("estimate_min_minutes", 1)
        if value < minimum:
            raise ValueError("estimate_max_minutes must be >= estimate_min_minutes")
        return value

    @property
    def delivery_max_retries(self) -> int:
        """Redeliveries allowed after the first attempt."""
        return self.delivery_max_attempts - 1


settings = Settings()
