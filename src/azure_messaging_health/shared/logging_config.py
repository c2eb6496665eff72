"""Logging configuration for structured probe logs."""
import logging
import sys

# Azure SDK loggers that emit per-frame AMQP and HTTP traces at INFO
NOISY_LOGGERS = ("azure", "uamqp", "pyamqp", "asyncio")


def configure_structured_logging(level: str = "INFO", sdk_level: str = "WARNING"):
    """Configure root logging for JSON health-probe output."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",  # JSON already formatted
        stream=sys.stdout,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(getattr(logging, sdk_level.upper()))
