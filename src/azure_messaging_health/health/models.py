"""
Health check data model.

Defines the tri-state health result produced by every probe invocation, the
registration and context objects the health-check service hands to probes,
and the explicit success/failure outcome used at the SDK boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .base import AzureMessagingHealthCheck


class HealthStatus(Enum):
    """Health status levels, ordered from worst to best."""

    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"
    HEALTHY = "healthy"

    @property
    def severity(self) -> int:
        """Lower is worse."""
        return _STATUS_SEVERITY[self]

    @classmethod
    def worst(cls, statuses) -> "HealthStatus":
        """Return the worst of the given statuses, HEALTHY when empty."""
        return min(statuses, key=lambda status: status.severity, default=cls.HEALTHY)


_STATUS_SEVERITY = {
    HealthStatus.UNHEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.HEALTHY: 2,
}


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of a single health check invocation."""

    status: HealthStatus
    description: str | None = None
    exception: BaseException | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def healthy(
        cls, description: str | None = None, data: dict[str, Any] | None = None
    ) -> "HealthCheckResult":
        return cls(HealthStatus.HEALTHY, description=description, data=data or {})

    @classmethod
    def degraded(
        cls,
        description: str | None = None,
        exception: BaseException | None = None,
        data: dict[str, Any] | None = None,
    ) -> "HealthCheckResult":
        return cls(
            HealthStatus.DEGRADED,
            description=description,
            exception=exception,
            data=data or {},
        )

    @classmethod
    def unhealthy(
        cls,
        description: str | None = None,
        exception: BaseException | None = None,
        data: dict[str, Any] | None = None,
    ) -> "HealthCheckResult":
        return cls(
            HealthStatus.UNHEALTHY,
            description=description,
            exception=exception,
            data=data or {},
        )

    @property
    def is_healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY


@dataclass
class HealthCheckRegistration:
    """A named probe together with its failure status, tags and timeout."""

    name: str
    check: "AzureMessagingHealthCheck"
    failure_status: HealthStatus = HealthStatus.UNHEALTHY
    tags: frozenset[str] = field(default_factory=frozenset)
    timeout: float | None = None

    def __post_init__(self):
        self.tags = frozenset(self.tags or ())


@dataclass(frozen=True)
class HealthCheckContext:
    """Context handed to a probe by the health-check service."""

    registration: HealthCheckRegistration

    @property
    def failure_status(self) -> HealthStatus:
        return self.registration.failure_status


@dataclass(frozen=True)
class ProbeSuccess:
    """The metadata call completed; ``properties`` is whatever the SDK returned."""

    properties: Any = None


@dataclass(frozen=True)
class ProbeFailure:
    """The probe failed, either with a reason, an exception, or both."""

    description: str | None = None
    error: BaseException | None = None


ProbeOutcome = ProbeSuccess | ProbeFailure


@dataclass(frozen=True)
class HealthReportEntry:
    """Per-registration entry of a health report."""

    status: HealthStatus
    duration_seconds: float
    description: str | None = None
    exception: BaseException | None = None
    data: dict[str, Any] = field(default_factory=dict)
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class HealthReport:
    """Aggregate of every health check executed in one service run."""

    entries: dict[str, HealthReportEntry]
    total_duration_seconds: float

    @property
    def status(self) -> HealthStatus:
        return HealthStatus.worst(entry.status for entry in self.entries.values())
