"""
Azure Messaging Health

Health-check probes for Azure messaging resources:
- Event Hub (producer client, hub properties)
- Service Bus queues, topics and subscriptions (administration client)
- Registration builder, concurrent health-check service and FastAPI surface
"""

__version__ = "1.0.0"
__author__ = "Azure Messaging Health"
