"""
Azure Service Bus health probes.

Queues, topics and subscriptions are probed with the Service Bus
administration client, which reads entity properties without touching
messages. Each entity gets its own cached client, keyed by the namespace-level
connection string plus the entity path.
"""

import logging
from typing import Any

from azure.core.credentials import AzureNamedKeyCredential, AzureSasCredential
from azure.core.credentials_async import AsyncTokenCredential
from azure.servicebus.aio.management import ServiceBusAdministrationClient

from ..shared.credential_utils import (
    SUBSCRIPTIONS_SEGMENT,
    build_servicebus_connection_key,
    get_entity_path,
    strip_entity_path,
    subscription_entity_path,
)
from ..shared.exceptions import HealthCheckConfigurationError
from .base import AzureMessagingHealthCheck, require_non_empty
from .client_cache import ClientRegistry

logger = logging.getLogger(__name__)

ServiceBusCredential = AsyncTokenCredential | AzureSasCredential | AzureNamedKeyCredential

_SUBSCRIPTION_SEPARATOR = f"/{SUBSCRIPTIONS_SEGMENT}/"


def _resolve_entity_name(
    connection_string: str, explicit_name: str | None, parameter: str, description: str
) -> str:
    """Explicit name if given (must be non-empty), otherwise the EntityPath."""
    if explicit_name is not None:
        return require_non_empty(explicit_name, parameter)

    entity_path = get_entity_path(connection_string)
    if entity_path is None:
        raise HealthCheckConfigurationError(
            f"Connection string should contain {description}.", parameter=parameter
        )
    return entity_path


def _require_credential(credential: Any):
    if credential is None:
        raise HealthCheckConfigurationError("Value cannot be null.", parameter="credential")


class AzureServiceBusHealthCheck(AzureMessagingHealthCheck):
    """Common client handling for Service Bus entity probes."""

    check_type = "servicebus"
    client_type = "ServiceBusAdministrationClient"

    def _create_client(self) -> ServiceBusAdministrationClient:
        return ServiceBusAdministrationClient.from_connection_string(
            self._require_connection_string()
        )

    @classmethod
    def _bind_credential(
        cls,
        fully_qualified_namespace: str,
        entity_path: str,
        credential: ServiceBusCredential,
        client_registry: ClientRegistry | None,
        client_kwargs: dict[str, Any],
    ):
        check = cls._bind(
            build_servicebus_connection_key(fully_qualified_namespace, entity_path),
            None,
            client_registry,
        )
        check._register_client(
            lambda: ServiceBusAdministrationClient(
                fully_qualified_namespace, credential, **client_kwargs
            )
        )
        logger.info(
            f"ServiceBusAdministrationClient registered for {fully_qualified_namespace}/{entity_path}"
        )
        return check


class AzureServiceBusQueueHealthCheck(AzureServiceBusHealthCheck):
    """Health check for an Azure Service Bus queue."""

    check_type = "servicebus_queue"

    def __init__(
        self,
        connection_string: str,
        queue_name: str | None = None,
        client_registry: ClientRegistry | None = None,
    ):
        require_non_empty(connection_string, "connection_string")
        self.queue_name = _resolve_entity_name(
            connection_string, queue_name, "queue_name", "queue name"
        )
        super().__init__(
            build_servicebus_connection_key(connection_string, self.queue_name),
            strip_entity_path(connection_string),
            client_registry,
        )

    @classmethod
    def from_credential(
        cls,
        fully_qualified_namespace: str,
        queue_name: str,
        credential: ServiceBusCredential,
        client_registry: ClientRegistry | None = None,
        **client_kwargs: Any,
    ) -> "AzureServiceBusQueueHealthCheck":
        """Create a queue probe whose client is built and cached immediately."""
        require_non_empty(fully_qualified_namespace, "fully_qualified_namespace")
        require_non_empty(queue_name, "queue_name")
        _require_credential(credential)

        check = cls._bind_credential(
            fully_qualified_namespace, queue_name, credential, client_registry, client_kwargs
        )
        check.queue_name = queue_name
        return check

    async def _fetch_properties(self, client: ServiceBusAdministrationClient) -> Any:
        return await client.get_queue(self.queue_name)


class AzureServiceBusTopicHealthCheck(AzureServiceBusHealthCheck):
    """Health check for an Azure Service Bus topic."""

    check_type = "servicebus_topic"

    def __init__(
        self,
        connection_string: str,
        topic_name: str | None = None,
        client_registry: ClientRegistry | None = None,
    ):
        require_non_empty(connection_string, "connection_string")
        self.topic_name = _resolve_entity_name(
            connection_string, topic_name, "topic_name", "topic name"
        )
        super().__init__(
            build_servicebus_connection_key(connection_string, self.topic_name),
            strip_entity_path(connection_string),
            client_registry,
        )

    @classmethod
    def from_credential(
        cls,
        fully_qualified_namespace: str,
        topic_name: str,
        credential: ServiceBusCredential,
        client_registry: ClientRegistry | None = None,
        **client_kwargs: Any,
    ) -> "AzureServiceBusTopicHealthCheck":
        """Create a topic probe whose client is built and cached immediately."""
        require_non_empty(fully_qualified_namespace, "fully_qualified_namespace")
        require_non_empty(topic_name, "topic_name")
        _require_credential(credential)

        check = cls._bind_credential(
            fully_qualified_namespace, topic_name, credential, client_registry, client_kwargs
        )
        check.topic_name = topic_name
        return check

    async def _fetch_properties(self, client: ServiceBusAdministrationClient) -> Any:
        return await client.get_topic(self.topic_name)


class AzureServiceBusSubscriptionHealthCheck(AzureServiceBusHealthCheck):
    """
    Health check for a subscription of an Azure Service Bus topic.

    The topic can come from the connection string's EntityPath. An EntityPath
    of the form ``{topic}/Subscriptions/{subscription}`` supplies both names.
    """

    check_type = "servicebus_subscription"

    def __init__(
        self,
        connection_string: str,
        topic_name: str | None = None,
        subscription_name: str | None = None,
        client_registry: ClientRegistry | None = None,
    ):
        require_non_empty(connection_string, "connection_string")

        path_topic, path_subscription = None, None
        entity_path = get_entity_path(connection_string)
        if entity_path:
            path_topic, _, path_subscription = entity_path.partition(
                _SUBSCRIPTION_SEPARATOR
            )

        if topic_name is not None:
            require_non_empty(topic_name, "topic_name")
        elif not path_topic:
            raise HealthCheckConfigurationError(
                "Connection string should contain topic name.", parameter="topic_name"
            )

        if subscription_name is not None:
            require_non_empty(subscription_name, "subscription_name")
        elif not path_subscription:
            raise HealthCheckConfigurationError(
                "Value cannot be null or empty.", parameter="subscription_name"
            )

        self.topic_name = topic_name or path_topic
        self.subscription_name = subscription_name or path_subscription
        super().__init__(
            build_servicebus_connection_key(
                connection_string,
                subscription_entity_path(self.topic_name, self.subscription_name),
            ),
            strip_entity_path(connection_string),
            client_registry,
        )

    @classmethod
    def from_credential(
        cls,
        fully_qualified_namespace: str,
        topic_name: str,
        subscription_name: str,
        credential: ServiceBusCredential,
        client_registry: ClientRegistry | None = None,
        **client_kwargs: Any,
    ) -> "AzureServiceBusSubscriptionHealthCheck":
        """Create a subscription probe whose client is built and cached immediately."""
        require_non_empty(fully_qualified_namespace, "fully_qualified_namespace")
        require_non_empty(topic_name, "topic_name")
        require_non_empty(subscription_name, "subscription_name")
        _require_credential(credential)

        check = cls._bind_credential(
            fully_qualified_namespace,
            subscription_entity_path(topic_name, subscription_name),
            credential,
            client_registry,
            client_kwargs,
        )
        check.topic_name = topic_name
        check.subscription_name = subscription_name
        return check

    async def _fetch_properties(self, client: ServiceBusAdministrationClient) -> Any:
        return await client.get_subscription(self.topic_name, self.subscription_name)
