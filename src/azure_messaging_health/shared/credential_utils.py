"""
Credential utility functions for connection string handling.

This module provides utilities for normalizing, validating and sanitizing
Azure Event Hub and Service Bus connection strings, and for deriving the
connection keys under which health-check clients are cached.
"""

import re

ENTITY_PATH_SEGMENT = "EntityPath="
SUBSCRIPTIONS_SEGMENT = "Subscriptions"

_ENTITY_PATH_PATTERN = re.compile(r"EntityPath=([^;]*)", flags=re.IGNORECASE)


def has_entity_path(conn_str: str) -> bool:
    """Return True when the connection string carries an EntityPath segment."""
    return bool(conn_str) and ENTITY_PATH_SEGMENT.lower() in conn_str.lower()


def get_entity_path(conn_str: str) -> str | None:
    """
    Extract the EntityPath value from a connection string.

    Returns:
        The entity path, or None when the segment is absent or empty
    """
    if not conn_str:
        return None

    match = _ENTITY_PATH_PATTERN.search(conn_str)
    if not match or not match.group(1).strip():
        return None
    return match.group(1).strip()


def strip_entity_path(conn_str: str) -> str:
    """Remove any EntityPath segment, leaving the namespace-level connection string."""
    parts = [
        part
        for part in conn_str.split(";")
        if part and not part.lower().startswith(ENTITY_PATH_SEGMENT.lower())
    ]
    return ";".join(parts)


def append_entity_path(conn_str: str, entity_path: str) -> str:
    """
    Append an EntityPath segment to a connection string.

    Example:
        Input:  "Endpoint=sb://x;SharedAccessKey=k", "myhub"
        Output: "Endpoint=sb://x;SharedAccessKey=k;EntityPath=myhub"
    """
    return f"{conn_str.rstrip(';')};{ENTITY_PATH_SEGMENT}{entity_path}"


def build_event_hub_connection_string(conn_str: str, event_hub_name: str | None) -> str:
    """
    Build the Event Hub connection string used as the client connection key.

    The hub named by the connection string's EntityPath takes precedence over
    ``event_hub_name``. Either way the EntityPath is moved to the end, so
    equivalent connection strings map to the same key.

    Example:
        Input:  "EntityPath=orders;Endpoint=sb://x;SharedAccessKey=k;", None
        Output: "Endpoint=sb://x;SharedAccessKey=k;EntityPath=orders"
    """
    return append_entity_path(
        strip_entity_path(conn_str), get_entity_path(conn_str) or event_hub_name
    )


def subscription_entity_path(topic_name: str, subscription_name: str) -> str:
    """Service Bus entity path of a topic subscription."""
    return f"{topic_name}/{SUBSCRIPTIONS_SEGMENT}/{subscription_name}"


def build_servicebus_connection_key(conn_str: str, entity_path: str) -> str:
    """
    Build the connection key of a Service Bus entity.

    Any EntityPath already present is replaced so that the key always names
    the entity that is actually probed.
    """
    return append_entity_path(strip_entity_path(conn_str), entity_path)


def validate_connection_string(conn_str: str) -> tuple[bool, str]:
    """
    Validate the general shape of an Event Hub or Service Bus connection string.

    Expected format:
    Endpoint=sb://xxx.servicebus.windows.net/;SharedAccessKeyName=xxx;SharedAccessKey=xxx[;EntityPath=xxx]

    Shared access signatures (SharedAccessSignature=...) are accepted in place
    of a key name/key pair.

    Returns:
        Tuple of (is_valid, error_message)
        - is_valid: True if connection string is valid
        - error_message: Empty string if valid, error description if invalid
    """
    if not conn_str or not isinstance(conn_str, str):
        return False, "Connection string is empty or not a string"

    if not conn_str.strip():
        return False, "Connection string contains only whitespace"

    conn_str = conn_str.strip()

    endpoint_match = re.search(r"Endpoint=(sb://[^;]+)", conn_str)
    if not endpoint_match:
        return False, "Missing required part: endpoint (Endpoint=sb://...)"

    if "SharedAccessSignature=" not in conn_str:
        key_match = re.search(r"SharedAccessKey=([^;]+)", conn_str)
        if not key_match or not key_match.group(1).strip():
            return False, "SharedAccessKey cannot be empty"

    # EntityPath is optional but should be non-empty if present
    if has_entity_path(conn_str) and get_entity_path(conn_str) is None:
        return False, "EntityPath cannot be empty if specified"

    return True, ""


def sanitize_connection_string(conn_str: str) -> str:
    """
    Sanitize connection string for safe logging by redacting sensitive keys.

    This function redacts the SharedAccessKey and SharedAccessSignature values
    while preserving other components for debugging purposes.

    Example:
        Input:  "Endpoint=sb://test.servicebus.windows.net/;SharedAccessKeyName=RootManageSharedAccessKey;SharedAccessKey=abc123"
        Output: "Endpoint=sb://test.servicebus.windows.net/;SharedAccessKeyName=RootManageSharedAccessKey;SharedAccessKey=***REDACTED***"
    """
    if not conn_str:
        return "[empty]"

    if not conn_str.strip():
        return "[whitespace-only]"

    sanitized = re.sub(
        r"(SharedAccess(?:Key|Signature)=)[^;]+",
        r"\1***REDACTED***",
        conn_str,
        flags=re.IGNORECASE,
    )

    return sanitized
