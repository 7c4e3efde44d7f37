from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent  # playback-relay/

DEFAULT_CONTROL_API_BASE_URL = "https://api.ws.sonos.com/control/api/v1/groups/"


class Settings(BaseSettings):
    """Application settings with validation.

    Every field has a default so the relay starts without a .env file.
    Session credentials are NOT settings: they arrive at runtime through
    the credential intake endpoint.
    """

    # API server settings
    api_host: str = Field(default="0.0.0.0", min_length=1, description="API server host")
    api_port: int = Field(ge=1, le=65535, default=8080, description="API server port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Upstream control API
    control_api_base_url: str = Field(
        default=DEFAULT_CONTROL_API_BASE_URL,
        pattern=r"^https?://",
        description="Base URL of the group control API; the group id and action path are appended",
    )
    upstream_connect_timeout: float = Field(default=5.0, gt=0, description="Connect timeout for control calls")
    upstream_read_timeout: float = Field(default=10.0, gt=0, description="Read timeout for control calls")

    # Webhook ingestion
    webhook_type_header: str = Field(
        default="x-sonos-type",
        min_length=1,
        description="Request header carrying the event classification",
    )

    # Push channel
    subscriber_queue_size: int = Field(
        default=100,
        ge=1,
        description="Messages buffered per push subscriber before the oldest is dropped",
    )

    # HTTP surface
    cors_origins: str = Field(default="*", description="Comma separated list of allowed CORS origins")
    command_rate_limit: str = Field(default="60/minute", description="slowapi limit for command endpoints")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("control_api_base_url", mode="before")
    @classmethod
    def strip_control_api_base_url(cls, v: object) -> object:
        """Strip whitespace before the scheme pattern is checked."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("control_api_base_url", mode="after")
    @classmethod
    def validate_control_api_base_url(cls, v: str) -> str:
        """Make sure the base ends with a slash."""
        if not v.endswith("/"):
            v += "/"
        return v

    @field_validator("webhook_type_header", mode="after")
    @classmethod
    def validate_webhook_type_header(cls, v: str) -> str:
        """Header names are matched lower case."""
        v = v.strip().lower()
        if not v:
            raise ValueError("webhook_type_header cannot be empty")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v

    def get_cors_origins(self) -> list[str]:
        """Return allowed CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Use this with FastAPI's Depends() so tests can override it.

    Returns:
        Cached Settings instance

    Example:
        @app.get("/")
        async def route(settings: Settings = Depends(get_settings)):
            return {"base": settings.control_api_base_url}
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
