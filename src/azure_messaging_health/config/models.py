"""
Configuration models for the Azure messaging health checks.

These models define the structure and validation of the JSON file that
declares which Event Hubs, queues, topics and subscriptions are probed.
Connection strings may be omitted from the file and supplied through the
AZURE_EVENTHUB_CONNECTION_STRING / AZURE_SERVICEBUS_CONNECTION_STRING
environment variables instead.
"""

import json
import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator, model_validator

from ..health.models import HealthStatus
from ..shared.credential_utils import (
    sanitize_connection_string,
    validate_connection_string,
)

logger = logging.getLogger(__name__)

EVENTHUB_CONNECTION_ENV = "AZURE_EVENTHUB_CONNECTION_STRING"
SERVICEBUS_CONNECTION_ENV = "AZURE_SERVICEBUS_CONNECTION_STRING"
CONFIG_PATH_ENV = "AZURE_HEALTH_CONFIG_PATH"


class ProbeConfig(BaseModel):
    """Settings shared by every probe registration."""

    name: str | None = Field(
        default=None,
        min_length=1,
        description="Health check name (defaults to the probe type name)",
    )
    connection_string: str = Field(
        default="", description="Connection string (falls back to an env var)"
    )
    failure_status: HealthStatus = Field(
        default=HealthStatus.UNHEALTHY,
        description="Status reported when the probe fails",
    )
    tags: list[str] = Field(
        default_factory=list, description="Tags used to filter health checks"
    )
    timeout_seconds: float | None = Field(
        default=None, gt=0.0, description="Per-check timeout enforced by the service"
    )

    connection_env_var: ClassVar[str] = SERVICEBUS_CONNECTION_ENV

    @model_validator(mode="after")
    def load_connection_string_from_env(self):
        """Load connection string from environment variable if not provided."""
        if not self.connection_string:
            self.connection_string = os.getenv(self.connection_env_var, "")

        if not self.connection_string:
            raise ValueError(
                f"connection_string is required (or set {self.connection_env_var})"
            )

        is_valid, error = validate_connection_string(self.connection_string)
        if not is_valid:
            raise ValueError(
                f"Invalid connection string "
                f"({sanitize_connection_string(self.connection_string)}): {error}"
            )
        return self


class EventHubCheckConfig(ProbeConfig):
    """Configuration of an Event Hub probe."""

    event_hub_name: str | None = Field(
        default=None,
        min_length=1,
        description="Event Hub name (can alternatively be the connection string EntityPath)",
    )
    connection_env_var: ClassVar[str] = EVENTHUB_CONNECTION_ENV


class QueueCheckConfig(ProbeConfig):
    """Configuration of a Service Bus queue probe."""

    queue_name: str | None = Field(default=None, min_length=1, description="Queue name")


class TopicCheckConfig(ProbeConfig):
    """Configuration of a Service Bus topic probe."""

    topic_name: str | None = Field(default=None, min_length=1, description="Topic name")


class SubscriptionCheckConfig(ProbeConfig):
    """Configuration of a Service Bus topic subscription probe."""

    topic_name: str | None = Field(default=None, min_length=1, description="Topic name")
    subscription_name: str | None = Field(
        default=None, min_length=1, description="Subscription name"
    )


class HealthChecksConfig(BaseModel):
    """Top-level health checks configuration."""

    log_level: str = Field(default="INFO", description="Root log level")
    event_hubs: list[EventHubCheckConfig] = Field(default_factory=list)
    queues: list[QueueCheckConfig] = Field(default_factory=list)
    topics: list[TopicCheckConfig] = Field(default_factory=list)
    subscriptions: list[SubscriptionCheckConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_file(cls, file_path: str | Path) -> "HealthChecksConfig":
        """Load configuration from a JSON file."""
        path = Path(file_path)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        config = cls(**data)
        logger.info(f"Loaded health checks configuration from {path}")
        return config

    @classmethod
    def from_env(cls) -> "HealthChecksConfig":
        """Load the file named by AZURE_HEALTH_CONFIG_PATH, or an empty config."""
        config_path = os.getenv(CONFIG_PATH_ENV)
        if not config_path:
            logger.warning(f"{CONFIG_PATH_ENV} not set - no health checks configured")
            return cls()
        return cls.from_file(config_path)
