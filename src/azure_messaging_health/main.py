"""
FastAPI application entry point for the Azure messaging health checks.

The application loads the health checks configuration, registers the probes
on a dedicated client registry and serves the aggregated health report.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .api.router import create_health_router
from .config.models import HealthChecksConfig
from .health.builder import HealthChecksBuilder
from .health.client_cache import ClientRegistry
from .health.service import HealthCheckService
from .shared.logging_config import configure_structured_logging

logger = logging.getLogger(__name__)

APP_NAME = "Azure Messaging Health API"


def create_service(config: HealthChecksConfig) -> HealthCheckService:
    """Register every configured probe and return the service running them."""
    builder = HealthChecksBuilder(client_registry=ClientRegistry())
    builder.add_from_config(config)
    return builder.build_service()


def create_app(config: HealthChecksConfig | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Configuration errors raise here, before the server starts accepting
    requests.
    """
    config = config or HealthChecksConfig.from_env()
    configure_structured_logging(level=config.log_level)
    service = create_service(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Starting {APP_NAME} v{__version__} "
            f"with {len(service.registrations)} health checks"
        )
        yield
        await service.aclose()
        logger.info(f"{APP_NAME} stopped")

    app = FastAPI(title=APP_NAME, version=__version__, lifespan=lifespan)
    app.state.health_service = service
    app.include_router(create_health_router(service))
    return app


def main():
    """Serve the health API with uvicorn."""
    import uvicorn

    uvicorn.run(
        create_app(),
        host=os.getenv("AZURE_HEALTH_HOST", "0.0.0.0"),
        port=int(os.getenv("AZURE_HEALTH_PORT", "8080")),
    )


if __name__ == "__main__":
    main()
