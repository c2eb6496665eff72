"""
Health check service.

Runs registered probes concurrently, enforces each registration's timeout and
aggregates the results into a ``HealthReport``. The report status is the
worst entry status.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable

from .client_cache import ClientRegistry
from .models import (
    HealthCheckContext,
    HealthCheckRegistration,
    HealthCheckResult,
    HealthReport,
    HealthReportEntry,
)

logger = logging.getLogger(__name__)

RegistrationPredicate = Callable[[HealthCheckRegistration], bool]


class HealthCheckService:
    """Executes health check registrations and builds health reports."""

    def __init__(
        self,
        registrations: Iterable[HealthCheckRegistration],
        client_registry: ClientRegistry | None = None,
    ):
        self.registrations = list(registrations)
        self.client_registry = client_registry

    async def check_health(
        self,
        predicate: RegistrationPredicate | None = None,
        cancellation: asyncio.Event | None = None,
    ) -> HealthReport:
        """
        Run every registration accepted by ``predicate`` concurrently.

        Args:
            predicate: Optional filter over registrations
            cancellation: Forwarded to every probe

        Returns:
            HealthReport: One entry per executed registration
        """
        selected = [r for r in self.registrations if predicate is None or predicate(r)]

        started = time.perf_counter()
        entries = await asyncio.gather(
            *(self._run_registration(r, cancellation) for r in selected)
        )
        total = time.perf_counter() - started

        report = HealthReport(
            entries={r.name: entry for r, entry in zip(selected, entries)},
            total_duration_seconds=total,
        )
        logger.info(
            f"Health report: {report.status.value} "
            f"({len(selected)} checks in {total:.3f}s)"
        )
        return report

    async def check_health_by_tags(
        self, tags: Iterable[str], cancellation: asyncio.Event | None = None
    ) -> HealthReport:
        """Run the registrations carrying at least one of ``tags``."""
        wanted = frozenset(tags)
        return await self.check_health(
            predicate=lambda registration: bool(registration.tags & wanted),
            cancellation=cancellation,
        )

    async def _run_registration(
        self,
        registration: HealthCheckRegistration,
        cancellation: asyncio.Event | None,
    ) -> HealthReportEntry:
        context = HealthCheckContext(registration=registration)
        started = time.perf_counter()

        try:
            result = await asyncio.wait_for(
                registration.check.check_health(context, cancellation),
                timeout=registration.timeout,
            )
        except TimeoutError as e:
            result = HealthCheckResult(
                registration.failure_status,
                description="Health check timed out",
                exception=e,
            )
        except Exception as e:
            # Probes contain their own failures; this guards custom probes
            logger.error(f"Health check '{registration.name}' raised: {e}")
            result = HealthCheckResult(
                registration.failure_status, description=str(e), exception=e
            )

        return HealthReportEntry(
            status=result.status,
            duration_seconds=time.perf_counter() - started,
            description=result.description,
            exception=result.exception,
            data=result.data,
            tags=registration.tags,
        )

    async def aclose(self):
        """Release the clients cached for this service's probes."""
        if self.client_registry is not None:
            await self.client_registry.aclose()
