"""
Client registry shared by health probes.

Holds one SDK client per connection key. Inserts are insert-if-absent under a
lock; lookups are plain dictionary reads and never block. Entries live for
the life of the registry and are only released by ``aclose`` at shutdown.
"""

import asyncio
import logging
import threading
from typing import Any

from ..shared.metrics import metrics_collector

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Mapping from connection key to a long-lived SDK client."""

    def __init__(self):
        self._clients: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, connection_key: str) -> Any | None:
        """Return the client cached for ``connection_key``, or None."""
        return self._clients.get(connection_key)

    def try_add(self, connection_key: str, client: Any) -> bool:
        """
        Insert ``client`` unless a client is already cached for the key.

        Returns:
            bool: True if this call inserted the client, False if it lost to
            an existing entry (which is left untouched)
        """
        with self._lock:
            if connection_key in self._clients:
                return False
            self._clients[connection_key] = client

        metrics_collector.record_client_cached()
        return True

    def __contains__(self, connection_key: str) -> bool:
        return connection_key in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def keys(self) -> list[str]:
        return list(self._clients)

    async def aclose(self):
        """Close every cached client and empty the registry."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()

        results = await asyncio.gather(
            *(client.close() for client in clients), return_exceptions=True
        )
        for result in results:
            if isinstance(result, Exception):
                logger.warning(f"Error closing cached client: {result}")

        metrics_collector.record_clients_released(len(clients))
        logger.info(f"Client registry closed ({len(clients)} clients released)")


_default_registry = ClientRegistry()


def get_default_registry() -> ClientRegistry:
    """Return the process-wide registry used when none is injected."""
    return _default_registry
