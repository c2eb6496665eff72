"""API response models for the health endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from ..health.models import HealthReport, HealthStatus


class HealthCheckEntryResponse(BaseModel):
    """One health check within a health report."""

    status: HealthStatus = Field(..., description="Health check status")
    duration_ms: float = Field(..., ge=0.0, description="Execution time in milliseconds")
    description: str | None = Field(None, description="Failure reason, if any")
    error: str | None = Field(None, description="Exception captured by the probe")
    tags: list[str] = Field(default_factory=list, description="Health check tags")


class HealthReportResponse(BaseModel):
    """Response model for the aggregated health report."""

    status: HealthStatus = Field(..., description="Overall health status")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")
    total_duration_ms: float = Field(..., ge=0.0, description="Total execution time")
    checks: dict[str, HealthCheckEntryResponse] = Field(
        ..., description="Individual health checks keyed by name"
    )

    @classmethod
    def from_report(
        cls, report: HealthReport, timestamp: datetime, version: str
    ) -> "HealthReportResponse":
        return cls(
            status=report.status,
            timestamp=timestamp,
            version=version,
            total_duration_ms=report.total_duration_seconds * 1000,
            checks={
                name: HealthCheckEntryResponse(
                    status=entry.status,
                    duration_ms=entry.duration_seconds * 1000,
                    description=entry.description,
                    error=(
                        f"{type(entry.exception).__name__}: {entry.exception}"
                        if entry.exception is not None
                        else None
                    ),
                    tags=sorted(entry.tags),
                )
                for name, entry in report.entries.items()
            },
        )
