"""
Base class for Azure messaging health probes.

A probe is bound to one messaging entity through its connection key. Each
invocation resolves the SDK client for that key from a ``ClientRegistry``
(creating and inserting it on first use), issues one metadata call and maps
the outcome to a ``HealthCheckResult``. Nothing raised by client creation or
the metadata call escapes ``check_health``.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from typing import Any

from ..shared.credential_utils import sanitize_connection_string
from ..shared.exceptions import (
    ClientRegistrationError,
    HealthCheckConfigurationError,
    ProbeCancelledError,
)
from ..shared.logging_utils import get_structured_logger
from ..shared.metrics import metrics_collector
from .client_cache import ClientRegistry, get_default_registry
from .models import (
    HealthCheckContext,
    HealthCheckResult,
    ProbeFailure,
    ProbeOutcome,
    ProbeSuccess,
)


def require_non_empty(value: str | None, parameter: str) -> str:
    """Raise a configuration error when ``value`` is None or empty."""
    if not value:
        raise HealthCheckConfigurationError(
            "Value cannot be null or empty.", parameter=parameter
        )
    return value


async def await_cancellable(
    coro: Coroutine[Any, Any, Any], cancellation: asyncio.Event | None
) -> Any:
    """
    Await ``coro`` unless ``cancellation`` is set first.

    When the event fires before the call completes, the call is cancelled and
    ``ProbeCancelledError`` is raised. Cancellation of the calling task itself
    is propagated unchanged.
    """
    if cancellation is None:
        return await coro

    if cancellation.is_set():
        coro.close()
        raise ProbeCancelledError()

    call = asyncio.ensure_future(coro)
    waiter = asyncio.ensure_future(cancellation.wait())
    try:
        await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        call.cancel()
        raise
    finally:
        waiter.cancel()

    if call.done():
        return call.result()

    call.cancel()
    await asyncio.gather(call, return_exceptions=True)
    raise ProbeCancelledError()


class AzureMessagingHealthCheck(ABC):
    """Cached-client health probe for one Azure messaging entity."""

    check_type: str = "azure"
    client_type: str = "Client"

    def __init__(
        self,
        connection_key: str,
        connection_string: str | None,
        client_registry: ClientRegistry | None = None,
    ):
        self._connection_key = connection_key
        self._connection_string = connection_string
        self._registry = client_registry if client_registry is not None else get_default_registry()
        self.log = get_structured_logger(
            __name__,
            check_type=self.check_type,
            connection=sanitize_connection_string(connection_key),
        )

    @property
    def connection_key(self) -> str:
        return self._connection_key

    @property
    def client_registry(self) -> ClientRegistry:
        return self._registry

    @abstractmethod
    def _create_client(self) -> Any:
        """Build a new SDK client from the stored connection string."""

    @abstractmethod
    async def _fetch_properties(self, client: Any) -> Any:
        """Issue the lightweight metadata request against the entity."""

    @classmethod
    def _bind(
        cls,
        connection_key: str,
        connection_string: str | None,
        client_registry: ClientRegistry | None,
    ):
        """Create a probe for an already-derived key, bypassing argument parsing."""
        check = cls.__new__(cls)
        AzureMessagingHealthCheck.__init__(
            check, connection_key, connection_string, client_registry
        )
        return check

    def _register_client(self, client_factory: Callable[[], Any]):
        """
        Eagerly create and cache a client; used by credential-based construction.

        The factory is only called when no client is cached for the key yet.
        """
        if self._connection_key in self._registry:
            raise ClientRegistrationError(self.client_type, self._connection_key)
        # SDK clients connect lazily, so a client losing the insert here holds no connection
        if not self._registry.try_add(self._connection_key, client_factory()):
            raise ClientRegistrationError(self.client_type, self._connection_key)

    def _require_connection_string(self) -> str:
        if not self._connection_string:
            raise HealthCheckConfigurationError(
                f"No cached {self.client_type} and no connection string to create one",
                parameter="connection_string",
            )
        return self._connection_string

    async def check_health(
        self,
        context: HealthCheckContext,
        cancellation: asyncio.Event | None = None,
    ) -> HealthCheckResult:
        """
        Probe the entity and report its health.

        Args:
            context: Carries the registration whose failure status is reported
                when the probe fails
            cancellation: Optional event; setting it aborts the metadata call

        Returns:
            HealthCheckResult: Healthy on success, otherwise the context's
            failure status with the failure reason or exception attached
        """
        log = self.log.bind(check_name=context.registration.name)
        log.set_correlation_id(log.generate_correlation_id())

        started = time.perf_counter()
        outcome = await self._probe(cancellation)
        duration = time.perf_counter() - started

        if isinstance(outcome, ProbeSuccess):
            result = HealthCheckResult.healthy()
            log.debug("Health probe succeeded", duration_seconds=round(duration, 4))
        else:
            result = HealthCheckResult(
                context.failure_status,
                description=outcome.description,
                exception=outcome.error,
            )
            log.warning(
                "Health probe failed",
                status=result.status.value,
                reason=outcome.description,
                error=repr(outcome.error) if outcome.error else None,
                duration_seconds=round(duration, 4),
            )

        metrics_collector.record_probe(self.check_type, result.status.value, duration)
        return result

    async def _probe(self, cancellation: asyncio.Event | None) -> ProbeOutcome:
        try:
            client = self._registry.get(self._connection_key)
            if client is None:
                client = self._create_client()
                if not self._registry.try_add(self._connection_key, client):
                    # Lost the insert race; this invocation fails rather than re-fetching
                    metrics_collector.record_registry_conflict()
                    await self._close_unregistered(client)
                    return ProbeFailure(
                        description=f"{self.client_type} can't be added into the client registry."
                    )

            properties = await await_cancellable(
                self._fetch_properties(client), cancellation
            )
            return ProbeSuccess(properties)
        except Exception as e:
            return ProbeFailure(error=e)

    async def _close_unregistered(self, client: Any):
        try:
            await client.close()
        except Exception as e:
            self.log.warning(
                f"Error closing unregistered {self.client_type}", error=repr(e)
            )
