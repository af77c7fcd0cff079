"""Health endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from cspkit.catalog.registry import load_catalog
from cspkit.config.loader import get_settings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check reporting the active environment and catalogue size."""
    services = len(load_catalog())
    return {
        "status": "healthy" if services else "degraded",
        "environment": get_settings().environment,
        "services": services,
    }
