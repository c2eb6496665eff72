"""
Custom exceptions for the Azure messaging health checks.

Configuration errors are raised while probes are being wired up and abort
setup. Probe-time errors are never raised out of a probe; they travel inside
health results.
"""


class AzureMessagingHealthError(Exception):
    """Base exception for all Azure messaging health check errors."""

    pass


class HealthCheckConfigurationError(AzureMessagingHealthError, ValueError):
    """Exception raised when a health check is configured with invalid arguments."""

    def __init__(self, message: str, parameter: str | None = None):
        self.parameter = parameter

        if parameter:
            message = f"{message} (Parameter '{parameter}')"

        super().__init__(message)


class ClientRegistrationError(AzureMessagingHealthError, RuntimeError):
    """Exception raised when a client is already registered for a connection key."""

    def __init__(self, client_type: str, connection_key: str | None = None):
        self.client_type = client_type
        self.connection_key = connection_key

        super().__init__(
            f"{client_type} can't be created using the specified connection."
        )


class ProbeCancelledError(AzureMessagingHealthError):
    """Exception attached to a health result when the probe was cancelled."""

    def __init__(self, message: str = "Health probe was cancelled"):
        super().__init__(message)
