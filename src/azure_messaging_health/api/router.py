"""
Health endpoints.

This module exposes the aggregated health report of a ``HealthCheckService``.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Query, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .. import __version__
from ..health.models import HealthStatus
from ..health.service import HealthCheckService
from .models import HealthReportResponse


def create_health_router(service: HealthCheckService) -> APIRouter:
    """Build a router serving ``/health`` and ``/metrics`` for ``service``."""
    router = APIRouter()

    @router.get(
        "/health",
        response_model=HealthReportResponse,
        summary="Health check",
        description="Run the registered Azure messaging health checks",
        responses={503: {"model": HealthReportResponse}},
    )
    async def health_check(
        response: Response,
        tag: list[str] | None = Query(
            None, description="Only run checks carrying one of these tags"
        ),
    ):
        """Aggregated health report; 503 when unhealthy."""
        if tag:
            report = await service.check_health_by_tags(tag)
        else:
            report = await service.check_health()

        if report.status is HealthStatus.UNHEALTHY:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

        return HealthReportResponse.from_report(
            report, timestamp=datetime.now(UTC), version=__version__
        )

    @router.get(
        "/metrics",
        summary="Prometheus metrics",
        description="Prometheus metrics for health probe outcomes and cached clients",
        tags=["Monitoring"],
    )
    async def prometheus_metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return router
