"""
Pytest configuration and fixtures for the Azure messaging health tests.

Provides connection strings, isolated client registries, health check
contexts, and mocks of the Azure Event Hub and Service Bus SDK clients.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Ensure src/ is on sys.path for local test runs without installation
_SRC = Path(__file__).resolve().parents[1] / "src"
if _SRC.exists() and str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from azure_messaging_health.health.client_cache import ClientRegistry  # noqa: E402
from azure_messaging_health.health.models import (  # noqa: E402
    HealthCheckContext,
    HealthCheckRegistration,
    HealthStatus,
)

VALID_CONNECTION_STRING = (
    "Endpoint=sb://test-namespace.servicebus.windows.net/;"
    "SharedAccessKeyName=RootManageSharedAccessKey;"
    "SharedAccessKey=dGVzdGtleTEyM3Rlc3RrZXkxMjM="
)


@pytest.fixture
def valid_connection_string() -> str:
    """Namespace-level connection string without an EntityPath."""
    return VALID_CONNECTION_STRING


@pytest.fixture
def connection_string_with_entity_path() -> str:
    """Connection string that names its entity through EntityPath."""
    return f"{VALID_CONNECTION_STRING};EntityPath=orders"


@pytest.fixture
def registry() -> ClientRegistry:
    """Fresh client registry so tests never share cached clients."""
    return ClientRegistry()


@pytest.fixture
def make_context():
    """Factory for health check contexts with a chosen failure status."""

    def _make(
        check=None,
        failure_status: HealthStatus = HealthStatus.UNHEALTHY,
        name: str = "test-check",
    ) -> HealthCheckContext:
        registration = HealthCheckRegistration(
            name=name, check=check, failure_status=failure_status
        )
        return HealthCheckContext(registration=registration)

    return _make


def _mock_client(**async_methods) -> MagicMock:
    client = MagicMock()
    client.close = AsyncMock()
    for method_name, return_value in async_methods.items():
        setattr(client, method_name, AsyncMock(return_value=return_value))
    return client


@pytest.fixture
def mock_eventhub_sdk():
    """Mock the Event Hub producer client class used by the Event Hub check."""
    with patch(
        "azure_messaging_health.health.eventhub.EventHubProducerClient"
    ) as mock_client:
        mock_instance = _mock_client(
            get_eventhub_properties={
                "eventhub_name": "orders",
                "partition_ids": ["0", "1", "2", "3"],
            }
        )
        mock_client.from_connection_string = MagicMock(return_value=mock_instance)
        mock_client.return_value = mock_instance

        yield mock_client


@pytest.fixture
def mock_servicebus_sdk():
    """Mock the Service Bus administration client class used by entity checks."""
    with patch(
        "azure_messaging_health.health.servicebus.ServiceBusAdministrationClient"
    ) as mock_client:
        mock_instance = _mock_client(
            get_queue=MagicMock(name="queue-properties"),
            get_topic=MagicMock(name="topic-properties"),
            get_subscription=MagicMock(name="subscription-properties"),
        )
        mock_client.from_connection_string = MagicMock(return_value=mock_instance)
        mock_client.return_value = mock_instance

        yield mock_client
