"""Schemas shared by health checks, errors and acknowledgements."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Liveness check body."""

    status: HealthStatus = Field(description="Service status")
    timestamp: datetime = Field(default_factory=_now, description="Check time (UTC)")
    version: str = Field(default="0.1.0", description="API version")


class CheckResult(BaseModel):
    """Outcome of probing one dependency."""

    name: str = Field(description="Dependency name")
    healthy: bool = Field(description="Whether the dependency answered")
    latency_ms: float | None = Field(default=None, description="Check round trip in milliseconds")
    error: str | None = Field(default=None, description="Failure reason")


class ReadinessResponse(BaseModel):
    """Readiness check body; unhealthy when any check fails."""

    status: HealthStatus = Field(description="Overall status")
    timestamp: datetime = Field(default_factory=_now, description="Check time (UTC)")
    checks: list[CheckResult] = Field(default_factory=list, description="Per-dependency results")

    @classmethod
    def from_checks(cls, checks: list[CheckResult]) -> "ReadinessResponse":
        healthy = all(check.healthy for check in checks)
        return cls(status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY, checks=checks)


class ErrorDetail(BaseModel):
    """One problem within an error, usually a field."""

    loc: list[str | int] | None = Field(default=None, description="Path to the offending field")
    msg: str = Field(description="What is wrong")
    type: str = Field(description="Problem code")


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str = Field(description="Error category, e.g. not_found")
    message: str = Field(description="Human-readable message")
    details: list[ErrorDetail] | None = Field(default=None, description="Per-field problems")
    request_id: str | None = Field(default=None, description="Request ID for log correlation")
    timestamp: datetime = Field(default_factory=_now, description="When the error happened (UTC)")

    @classmethod
    def from_exception(
        cls,
        error_type: str,
        message: str,
        details: list[dict[str, Any]] | None = None,
        request_id: str | None = None,
    ) -> "ErrorResponse":
        """Build a response from an error's parts.

        Detail dicts missing ``msg`` or ``type`` are stringified and typed
        as ``error``.
        """
        return cls(
            error=error_type,
            message=message,
            details=[
                ErrorDetail(loc=d.get("loc"), msg=d.get("msg", str(d)), type=d.get("type", "error"))
                for d in details
            ]
            if details
            else None,
            request_id=request_id,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(description="Status message")
