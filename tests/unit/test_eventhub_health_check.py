"""
Unit tests for the Azure Event Hub health check.

Covers constructor validation, connection key normalization, client caching,
healthy/unhealthy results, cancellation and the lost insert race.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from azure_messaging_health.health.eventhub import AzureEventHubHealthCheck
from azure_messaging_health.health.models import HealthStatus
from azure_messaging_health.shared.exceptions import (
    ClientRegistrationError,
    HealthCheckConfigurationError,
    ProbeCancelledError,
)

_hyp = pytest.importorskip("hypothesis")
from hypothesis import given  # noqa: E402
from hypothesis import strategies as st  # noqa: E402


class TestEventHubConstruction:
    """Constructor-time validation."""

    @pytest.mark.parametrize("connection_string", [None, ""])
    def test_empty_connection_string_is_rejected(self, connection_string, registry):
        with pytest.raises(HealthCheckConfigurationError) as exc_info:
            AzureEventHubHealthCheck(connection_string, "orders", client_registry=registry)

        assert exc_info.value.parameter == "connection_string"

    def test_empty_event_hub_name_is_rejected(self, valid_connection_string, registry):
        with pytest.raises(HealthCheckConfigurationError) as exc_info:
            AzureEventHubHealthCheck(valid_connection_string, "", client_registry=registry)

        assert exc_info.value.parameter == "event_hub_name"

    def test_missing_hub_name_without_entity_path_is_rejected(
        self, valid_connection_string, registry
    ):
        with pytest.raises(HealthCheckConfigurationError) as exc_info:
            AzureEventHubHealthCheck(valid_connection_string, client_registry=registry)

        assert "event hub name" in str(exc_info.value)

    def test_configuration_error_is_a_value_error(self, registry):
        with pytest.raises(ValueError):
            AzureEventHubHealthCheck("", client_registry=registry)

    def test_entity_path_in_connection_string_is_enough(
        self, connection_string_with_entity_path, registry
    ):
        check = AzureEventHubHealthCheck(
            connection_string_with_entity_path, client_registry=registry
        )

        assert check.connection_key == connection_string_with_entity_path

    def test_hub_name_is_appended_as_entity_path(self, registry):
        check = AzureEventHubHealthCheck(
            "Endpoint=sb://x;SharedAccessKey=k", "myhub", client_registry=registry
        )

        assert check.connection_key == "Endpoint=sb://x;SharedAccessKey=k;EntityPath=myhub"

    def test_connection_string_entity_path_wins_over_hub_name(
        self, connection_string_with_entity_path, registry
    ):
        check = AzureEventHubHealthCheck(
            connection_string_with_entity_path, "other-hub", client_registry=registry
        )

        assert check.connection_key == connection_string_with_entity_path

    def test_construction_does_not_create_client(
        self, mock_eventhub_sdk, valid_connection_string, registry
    ):
        AzureEventHubHealthCheck(valid_connection_string, "orders", client_registry=registry)

        mock_eventhub_sdk.from_connection_string.assert_not_called()
        assert len(registry) == 0

    @given(
        hub_name=st.text(
            alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_.",
            min_size=1,
            max_size=50,
        )
    )
    def test_connection_key_is_deterministic(self, hub_name):
        base = "Endpoint=sb://x;SharedAccessKey=k"

        first = AzureEventHubHealthCheck(base, hub_name)
        second = AzureEventHubHealthCheck(base, hub_name)

        assert first.connection_key == second.connection_key
        assert first.connection_key == f"{base};EntityPath={hub_name}"


class TestEventHubFromCredential:
    """Credential-based construction eagerly registers the producer."""

    def test_from_credential_registers_client(self, mock_eventhub_sdk, registry):
        credential = MagicMock()

        check = AzureEventHubHealthCheck.from_credential(
            "test-namespace.servicebus.windows.net",
            "orders",
            credential,
            client_registry=registry,
        )

        assert check.connection_key == "test-namespace.servicebus.windows.net;EntityPath=orders"
        assert registry.get(check.connection_key) is mock_eventhub_sdk.return_value
        mock_eventhub_sdk.assert_called_once_with(
            fully_qualified_namespace="test-namespace.servicebus.windows.net",
            eventhub_name="orders",
            credential=credential,
        )

    def test_duplicate_registration_is_rejected(self, mock_eventhub_sdk, registry):
        AzureEventHubHealthCheck.from_credential(
            "test-namespace.servicebus.windows.net", "orders", MagicMock(), client_registry=registry
        )

        with pytest.raises(ClientRegistrationError):
            AzureEventHubHealthCheck.from_credential(
                "test-namespace.servicebus.windows.net",
                "orders",
                MagicMock(),
                client_registry=registry,
            )

    def test_duplicate_registration_does_not_build_client(self, mock_eventhub_sdk, registry):
        AzureEventHubHealthCheck.from_credential(
            "test-namespace.servicebus.windows.net", "orders", MagicMock(), client_registry=registry
        )

        with pytest.raises(ClientRegistrationError):
            AzureEventHubHealthCheck.from_credential(
                "test-namespace.servicebus.windows.net",
                "orders",
                MagicMock(),
                client_registry=registry,
            )

        assert mock_eventhub_sdk.call_count == 1

    def test_missing_credential_is_rejected(self, registry):
        with pytest.raises(HealthCheckConfigurationError) as exc_info:
            AzureEventHubHealthCheck.from_credential(
                "test-namespace.servicebus.windows.net", "orders", None, client_registry=registry
            )

        assert exc_info.value.parameter == "credential"

    @pytest.mark.asyncio
    async def test_check_uses_registered_client(
        self, mock_eventhub_sdk, registry, make_context
    ):
        check = AzureEventHubHealthCheck.from_credential(
            "test-namespace.servicebus.windows.net", "orders", MagicMock(), client_registry=registry
        )

        result = await check.check_health(make_context(check))

        assert result.status is HealthStatus.HEALTHY
        mock_eventhub_sdk.from_connection_string.assert_not_called()


class TestEventHubCheckHealth:
    """Health check execution contract."""

    @pytest.mark.asyncio
    async def test_successful_call_is_healthy(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )

        result = await check.check_health(make_context(check))

        assert result.status is HealthStatus.HEALTHY
        assert result.exception is None
        mock_eventhub_sdk.from_connection_string.assert_called_once_with(
            conn_str=f"{valid_connection_string};EntityPath=orders"
        )
        mock_eventhub_sdk.return_value.get_eventhub_properties.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_call_reports_failure_status_with_error(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        error = ConnectionError("AMQP link detached")
        mock_eventhub_sdk.return_value.get_eventhub_properties.side_effect = error
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )

        result = await check.check_health(
            make_context(check, failure_status=HealthStatus.DEGRADED)
        )

        assert result.status is HealthStatus.DEGRADED
        assert result.exception is error

    @pytest.mark.asyncio
    async def test_client_creation_failure_is_unhealthy(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        mock_eventhub_sdk.from_connection_string.side_effect = ValueError("bad conn str")
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )

        result = await check.check_health(make_context(check))

        assert result.status is HealthStatus.UNHEALTHY
        assert isinstance(result.exception, ValueError)
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_probing_twice_reuses_cached_client(self, mock_eventhub_sdk, registry, make_context):
        check = AzureEventHubHealthCheck(
            "Endpoint=sb://x;SharedAccessKey=k", "myhub", client_registry=registry
        )

        await check.check_health(make_context(check))
        await check.check_health(make_context(check))

        mock_eventhub_sdk.from_connection_string.assert_called_once()
        assert registry.keys() == ["Endpoint=sb://x;SharedAccessKey=k;EntityPath=myhub"]

    @pytest.mark.asyncio
    async def test_checks_for_same_hub_share_client(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        first = AzureEventHubHealthCheck(valid_connection_string, "orders", client_registry=registry)
        second = AzureEventHubHealthCheck(
            f"{valid_connection_string};EntityPath=orders", client_registry=registry
        )

        await first.check_health(make_context(first))
        await second.check_health(make_context(second))

        assert first.connection_key == second.connection_key
        mock_eventhub_sdk.from_connection_string.assert_called_once()

    @pytest.mark.asyncio
    async def test_equivalent_connection_strings_share_client(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        trailing = AzureEventHubHealthCheck(
            f"{valid_connection_string};EntityPath=orders;", client_registry=registry
        )
        named = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )

        await trailing.check_health(make_context(trailing))
        await named.check_health(make_context(named))

        assert trailing.connection_key == named.connection_key
        mock_eventhub_sdk.from_connection_string.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancellation_during_call_is_unhealthy(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        async def never_returns():
            await asyncio.sleep(3600)

        mock_eventhub_sdk.return_value.get_eventhub_properties = AsyncMock(
            side_effect=never_returns
        )
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )
        cancellation = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, cancellation.set)

        result = await asyncio.wait_for(
            check.check_health(make_context(check), cancellation), timeout=5
        )

        assert result.status is HealthStatus.UNHEALTHY
        assert isinstance(result.exception, ProbeCancelledError)

    @pytest.mark.asyncio
    async def test_cancellation_before_call_is_unhealthy(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )
        cancellation = asyncio.Event()
        cancellation.set()

        result = await check.check_health(make_context(check), cancellation)

        assert result.status is HealthStatus.UNHEALTHY
        assert isinstance(result.exception, ProbeCancelledError)
        mock_eventhub_sdk.return_value.get_eventhub_properties.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unset_cancellation_does_not_interfere(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )

        result = await check.check_health(make_context(check), asyncio.Event())

        assert result.status is HealthStatus.HEALTHY


class TestLostInsertRace:
    """
    Known edge case: a check that loses the registry insert race fails the
    current invocation instead of re-fetching the winning client.
    """

    @pytest.mark.asyncio
    async def test_lost_race_fails_invocation_then_recovers(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )
        winner = MagicMock()
        winner.get_eventhub_properties = AsyncMock(return_value={"partition_ids": ["0"]})
        loser = MagicMock()
        loser.close = AsyncMock()

        def create_while_another_check_inserts(**kwargs):
            registry.try_add(check.connection_key, winner)
            return loser

        mock_eventhub_sdk.from_connection_string.side_effect = create_while_another_check_inserts

        first = await check.check_health(make_context(check))

        assert first.status is HealthStatus.UNHEALTHY
        assert first.exception is None
        assert "can't be added" in first.description
        loser.close.assert_awaited_once()
        assert registry.get(check.connection_key) is winner

        second = await check.check_health(make_context(check))

        assert second.status is HealthStatus.HEALTHY
        winner.get_eventhub_properties.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_close_of_losing_client_keeps_race_reason(
        self, mock_eventhub_sdk, valid_connection_string, registry, make_context
    ):
        check = AzureEventHubHealthCheck(
            valid_connection_string, "orders", client_registry=registry
        )
        loser = MagicMock()
        loser.close = AsyncMock(side_effect=RuntimeError("close failed"))

        def create_while_another_check_inserts(**kwargs):
            registry.try_add(check.connection_key, MagicMock())
            return loser

        mock_eventhub_sdk.from_connection_string.side_effect = create_while_another_check_inserts

        result = await check.check_health(make_context(check))

        assert result.status is HealthStatus.UNHEALTHY
        assert result.exception is None
        assert result.description == (
            "EventHubProducerClient can't be added into the client registry."
        )
        loser.close.assert_awaited_once()
