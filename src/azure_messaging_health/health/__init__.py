"""
Health probes for Azure messaging resources.

This package provides cached-client health probes for Event Hub and Service
Bus entities, the builder that registers them and the service that runs them.
"""

from .base import AzureMessagingHealthCheck
from .builder import HealthChecksBuilder
from .client_cache import ClientRegistry, get_default_registry
from .eventhub import AzureEventHubHealthCheck
from .models import (
    HealthCheckContext,
    HealthCheckRegistration,
    HealthCheckResult,
    HealthReport,
    HealthReportEntry,
    HealthStatus,
)
from .service import HealthCheckService
from .servicebus import (
    AzureServiceBusQueueHealthCheck,
    AzureServiceBusSubscriptionHealthCheck,
    AzureServiceBusTopicHealthCheck,
)

__all__ = [
    "AzureMessagingHealthCheck",
    "AzureEventHubHealthCheck",
    "AzureServiceBusQueueHealthCheck",
    "AzureServiceBusTopicHealthCheck",
    "AzureServiceBusSubscriptionHealthCheck",
    "ClientRegistry",
    "get_default_registry",
    "HealthChecksBuilder",
    "HealthCheckService",
    "HealthCheckContext",
    "HealthCheckRegistration",
    "HealthCheckResult",
    "HealthReport",
    "HealthReportEntry",
    "HealthStatus",
]
