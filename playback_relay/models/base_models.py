"""Pydantic models for health, debug and error responses."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness answer: the process is up."""

    status: Literal["ok", "alive"]
    version: str


class DetailedHealthResponse(BaseModel):
    """Readiness answer with one entry per checked component."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall readiness")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Current server timestamp")
    checks: dict[str, str] = Field(..., description="Component name -> ok / not_initialized / configured")


class DebugState(BaseModel):
    """Relay state summary. Has no token field."""

    http_client: Literal["initialized", "not_initialized"]
    session: Literal["configured", "not_configured"]
    session_group_id: str | None = None
    is_playing: bool
    push_subscribers: int = Field(..., ge=0)


class DebugInfo(BaseModel):
    """Diagnostics returned by /debug."""

    system: dict[str, Any] = Field(..., description="Version, uptime, interpreter")
    state: DebugState
    config: dict[str, Any] = Field(..., description="Effective non-secret settings")
    requests: dict[str, int] = Field(..., description="Request counters")


class ErrorResponse(BaseModel):
    """Body of every error answered by the relay."""

    error: str = Field(..., description="Human-readable message")
    code: str = Field(..., description="Machine-readable ErrorCode value")
    details: dict[str, Any] = Field(default_factory=dict)
