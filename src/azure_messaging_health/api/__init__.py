"""HTTP surface for the Azure messaging health checks."""

from .router import create_health_router

__all__ = ["create_health_router"]
