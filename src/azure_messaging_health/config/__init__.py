"""Configuration models for the Azure messaging health checks."""

from .models import (
    EventHubCheckConfig,
    HealthChecksConfig,
    QueueCheckConfig,
    SubscriptionCheckConfig,
    TopicCheckConfig,
)

__all__ = [
    "HealthChecksConfig",
    "EventHubCheckConfig",
    "QueueCheckConfig",
    "TopicCheckConfig",
    "SubscriptionCheckConfig",
]
