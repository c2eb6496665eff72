"""
Azure Event Hub health probe.

Probes an Event Hub by fetching its properties through a cached
``EventHubProducerClient``. The client is keyed by the connection string with
the hub name embedded as EntityPath, so probes for the same hub share one
producer.
"""

import logging
from typing import Any

from azure.core.credentials import AzureNamedKeyCredential, AzureSasCredential
from azure.core.credentials_async import AsyncTokenCredential
from azure.eventhub.aio import EventHubProducerClient

from ..shared.credential_utils import (
    ENTITY_PATH_SEGMENT,
    build_event_hub_connection_string,
    get_entity_path,
)
from ..shared.exceptions import HealthCheckConfigurationError
from .base import AzureMessagingHealthCheck, require_non_empty
from .client_cache import ClientRegistry

logger = logging.getLogger(__name__)

EventHubCredential = AsyncTokenCredential | AzureSasCredential | AzureNamedKeyCredential


class AzureEventHubHealthCheck(AzureMessagingHealthCheck):
    """
    Health check for an Azure Event Hub.

    The hub name can be given explicitly or embedded in the connection string
    as EntityPath. When both are present the connection string wins.

    Usage:
        check = AzureEventHubHealthCheck(conn_str, event_hub_name="orders")
        result = await check.check_health(context)
    """

    check_type = "eventhub"
    client_type = "EventHubProducerClient"

    def __init__(
        self,
        connection_string: str,
        event_hub_name: str | None = None,
        client_registry: ClientRegistry | None = None,
    ):
        require_non_empty(connection_string, "connection_string")

        if event_hub_name is not None:
            require_non_empty(event_hub_name, "event_hub_name")
        elif get_entity_path(connection_string) is None:
            raise HealthCheckConfigurationError(
                "Connection string should contain event hub name.",
                parameter="connection_string",
            )

        event_hub_connection_string = build_event_hub_connection_string(
            connection_string, event_hub_name
        )
        super().__init__(
            event_hub_connection_string, event_hub_connection_string, client_registry
        )

    @classmethod
    def from_credential(
        cls,
        fully_qualified_namespace: str,
        event_hub_name: str,
        credential: EventHubCredential,
        client_registry: ClientRegistry | None = None,
        **client_kwargs: Any,
    ) -> "AzureEventHubHealthCheck":
        """
        Create a probe from a namespace, hub name and credential.

        The producer client is created and cached immediately.

        Raises:
            HealthCheckConfigurationError: If an argument is missing
            ClientRegistrationError: If a producer is already cached for the hub
        """
        require_non_empty(fully_qualified_namespace, "fully_qualified_namespace")
        require_non_empty(event_hub_name, "event_hub_name")
        if credential is None:
            raise HealthCheckConfigurationError(
                "Value cannot be null.", parameter="credential"
            )

        connection_key = (
            f"{fully_qualified_namespace};{ENTITY_PATH_SEGMENT}{event_hub_name}"
        )
        check = cls._bind(connection_key, None, client_registry)
        check._register_client(
            lambda: EventHubProducerClient(
                fully_qualified_namespace=fully_qualified_namespace,
                eventhub_name=event_hub_name,
                credential=credential,
                **client_kwargs,
            )
        )
        logger.info(
            f"EventHubProducerClient registered for {fully_qualified_namespace}/{event_hub_name}"
        )
        return check

    def _create_client(self) -> EventHubProducerClient:
        return EventHubProducerClient.from_connection_string(
            conn_str=self._require_connection_string()
        )

    async def _fetch_properties(self, client: EventHubProducerClient) -> Any:
        return await client.get_eventhub_properties()
