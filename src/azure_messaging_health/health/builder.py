"""
Registration surface for Azure messaging health checks.

``HealthChecksBuilder`` turns connection strings, names, failure statuses,
tags and timeouts into ``HealthCheckRegistration`` objects. Probes are
constructed while registering, so configuration errors surface at setup time.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..shared.exceptions import HealthCheckConfigurationError
from .base import AzureMessagingHealthCheck
from .client_cache import ClientRegistry, get_default_registry
from .eventhub import AzureEventHubHealthCheck, EventHubCredential
from .models import HealthCheckRegistration, HealthStatus
from .servicebus import (
    AzureServiceBusQueueHealthCheck,
    AzureServiceBusSubscriptionHealthCheck,
    AzureServiceBusTopicHealthCheck,
    ServiceBusCredential,
)

if TYPE_CHECKING:
    from ..config.models import HealthChecksConfig
    from .service import HealthCheckService

logger = logging.getLogger(__name__)

AZURE_EVENT_HUB_NAME = "azureeventhub"
AZURE_QUEUE_NAME = "azurequeue"
AZURE_TOPIC_NAME = "azuretopic"
AZURE_SUBSCRIPTION_NAME = "azuresubscription"


class HealthChecksBuilder:
    """
    Collects health check registrations sharing one client registry.

    Usage:
        builder = HealthChecksBuilder()
        builder.add_azure_event_hub(conn_str, event_hub_name="orders")
        builder.add_azure_service_bus_queue(conn_str, "invoices", tags=["ready"])
        service = builder.build_service()
    """

    def __init__(self, client_registry: ClientRegistry | None = None):
        self.client_registry = (
            client_registry if client_registry is not None else get_default_registry()
        )
        self._registrations: dict[str, HealthCheckRegistration] = {}

    @property
    def registrations(self) -> list[HealthCheckRegistration]:
        return list(self._registrations.values())

    def add(
        self,
        name: str,
        check: AzureMessagingHealthCheck,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
    ) -> "HealthChecksBuilder":
        """
        Register ``check`` under ``name``.

        Raises:
            HealthCheckConfigurationError: If the name is empty, already
                registered, or the timeout is not positive
        """
        self._check_registration(name, timeout)

        self._registrations[name] = HealthCheckRegistration(
            name=name,
            check=check,
            failure_status=failure_status or HealthStatus.UNHEALTHY,
            tags=frozenset(tags or ()),
            timeout=timeout,
        )
        logger.debug(f"Registered health check '{name}' ({check.check_type})")
        return self

    def _check_registration(self, name: str, timeout: float | None) -> str:
        """Validate a registration before its probe (and any client) is built."""
        if not name:
            raise HealthCheckConfigurationError(
                "Value cannot be null or empty.", parameter="name"
            )
        if name in self._registrations:
            raise HealthCheckConfigurationError(
                f"Duplicate health checks were registered with the name: {name}",
                parameter="name",
            )
        if timeout is not None and timeout <= 0:
            raise HealthCheckConfigurationError(
                "Timeout must be positive.", parameter="timeout"
            )
        return name

    def add_azure_event_hub(
        self,
        connection_string: str,
        event_hub_name: str | None = None,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
    ) -> "HealthChecksBuilder":
        """Add a health check for an Azure Event Hub."""
        name = self._check_registration(name or AZURE_EVENT_HUB_NAME, timeout)
        check = AzureEventHubHealthCheck(
            connection_string, event_hub_name, client_registry=self.client_registry
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_azure_event_hub_with_credential(
        self,
        fully_qualified_namespace: str,
        event_hub_name: str,
        credential: EventHubCredential,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
        **client_kwargs: Any,
    ) -> "HealthChecksBuilder":
        """Add a health check for an Azure Event Hub reached through a credential."""
        name = self._check_registration(name or AZURE_EVENT_HUB_NAME, timeout)
        check = AzureEventHubHealthCheck.from_credential(
            fully_qualified_namespace,
            event_hub_name,
            credential,
            client_registry=self.client_registry,
            **client_kwargs,
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_azure_service_bus_queue(
        self,
        connection_string: str,
        queue_name: str | None = None,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
    ) -> "HealthChecksBuilder":
        """Add a health check for an Azure Service Bus queue."""
        name = self._check_registration(name or AZURE_QUEUE_NAME, timeout)
        check = AzureServiceBusQueueHealthCheck(
            connection_string, queue_name, client_registry=self.client_registry
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_azure_service_bus_queue_with_credential(
        self,
        fully_qualified_namespace: str,
        queue_name: str,
        credential: ServiceBusCredential,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
        **client_kwargs: Any,
    ) -> "HealthChecksBuilder":
        """Add a health check for a Service Bus queue reached through a credential."""
        name = self._check_registration(name or AZURE_QUEUE_NAME, timeout)
        check = AzureServiceBusQueueHealthCheck.from_credential(
            fully_qualified_namespace,
            queue_name,
            credential,
            client_registry=self.client_registry,
            **client_kwargs,
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_azure_service_bus_topic(
        self,
        connection_string: str,
        topic_name: str | None = None,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
    ) -> "HealthChecksBuilder":
        """Add a health check for an Azure Service Bus topic."""
        name = self._check_registration(name or AZURE_TOPIC_NAME, timeout)
        check = AzureServiceBusTopicHealthCheck(
            connection_string, topic_name, client_registry=self.client_registry
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_azure_service_bus_topic_with_credential(
        self,
        fully_qualified_namespace: str,
        topic_name: str,
        credential: ServiceBusCredential,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
        **client_kwargs: Any,
    ) -> "HealthChecksBuilder":
        """Add a health check for a Service Bus topic reached through a credential."""
        name = self._check_registration(name or AZURE_TOPIC_NAME, timeout)
        check = AzureServiceBusTopicHealthCheck.from_credential(
            fully_qualified_namespace,
            topic_name,
            credential,
            client_registry=self.client_registry,
            **client_kwargs,
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_azure_service_bus_subscription(
        self,
        connection_string: str,
        topic_name: str | None = None,
        subscription_name: str | None = None,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
    ) -> "HealthChecksBuilder":
        """Add a health check for a subscription of an Azure Service Bus topic."""
        name = self._check_registration(name or AZURE_SUBSCRIPTION_NAME, timeout)
        check = AzureServiceBusSubscriptionHealthCheck(
            connection_string,
            topic_name,
            subscription_name,
            client_registry=self.client_registry,
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_azure_service_bus_subscription_with_credential(
        self,
        fully_qualified_namespace: str,
        topic_name: str,
        subscription_name: str,
        credential: ServiceBusCredential,
        name: str | None = None,
        failure_status: HealthStatus | None = None,
        tags: Iterable[str] | None = None,
        timeout: float | None = None,
        **client_kwargs: Any,
    ) -> "HealthChecksBuilder":
        """Add a health check for a topic subscription reached through a credential."""
        name = self._check_registration(name or AZURE_SUBSCRIPTION_NAME, timeout)
        check = AzureServiceBusSubscriptionHealthCheck.from_credential(
            fully_qualified_namespace,
            topic_name,
            subscription_name,
            credential,
            client_registry=self.client_registry,
            **client_kwargs,
        )
        return self.add(name, check, failure_status, tags, timeout)

    def add_from_config(self, config: "HealthChecksConfig") -> "HealthChecksBuilder":
        """Register every probe described by a ``HealthChecksConfig``."""
        for hub in config.event_hubs:
            self.add_azure_event_hub(
                hub.connection_string,
                hub.event_hub_name,
                name=hub.name,
                failure_status=hub.failure_status,
                tags=hub.tags,
                timeout=hub.timeout_seconds,
            )
        for queue in config.queues:
            self.add_azure_service_bus_queue(
                queue.connection_string,
                queue.queue_name,
                name=queue.name,
                failure_status=queue.failure_status,
                tags=queue.tags,
                timeout=queue.timeout_seconds,
            )
        for topic in config.topics:
            self.add_azure_service_bus_topic(
                topic.connection_string,
                topic.topic_name,
                name=topic.name,
                failure_status=topic.failure_status,
                tags=topic.tags,
                timeout=topic.timeout_seconds,
            )
        for subscription in config.subscriptions:
            self.add_azure_service_bus_subscription(
                subscription.connection_string,
                subscription.topic_name,
                subscription.subscription_name,
                name=subscription.name,
                failure_status=subscription.failure_status,
                tags=subscription.tags,
                timeout=subscription.timeout_seconds,
            )

        logger.info(f"Registered {len(self._registrations)} health checks from config")
        return self

    def build_service(self) -> "HealthCheckService":
        """Create a ``HealthCheckService`` over the current registrations."""
        from .service import HealthCheckService

        return HealthCheckService(self.registrations, client_registry=self.client_registry)
