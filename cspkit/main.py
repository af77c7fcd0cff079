"""FastAPI application serving CSP generation."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from cspkit.catalog.registry import load_catalog, reset_catalog_cache
from cspkit.config.loader import CSPKitSettings, load_settings, register_reload_handler
from cspkit.health import router as health_router
from cspkit.logging_config import setup_logging
from cspkit.middleware.csp_headers import CSPHeaderMiddleware

logger = structlog.get_logger()


def _configure_logging(settings: CSPKitSettings) -> None:
    setup_logging(
        log_level=settings.log_level,
        json_format=settings.log_json,
        environment=settings.environment,
    )


def _reload_catalog(settings: CSPKitSettings) -> None:
    # catalog_file may have changed
    reset_catalog_cache()
    load_catalog()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings = load_settings()
    _configure_logging(settings)
    register_reload_handler(_configure_logging, _reload_catalog)

    # Warm the catalogue so the first request does not pay for YAML parsing
    catalog = load_catalog()

    logger.info("cspkit_started", environment=settings.environment, services=len(catalog))

    yield

    logger.info("cspkit_stopped")


app = FastAPI(title="CSP Kit", lifespan=lifespan)
app.add_middleware(CSPHeaderMiddleware)

# Mount health endpoint
app.include_router(health_router)


# Import and mount generation API (deferred to avoid circular imports)
from cspkit.api.generate_routes import router as generate_router  # noqa: E402

app.include_router(generate_router)
