"""Per-request CSP header injection middleware."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from cspkit.catalog.registry import resolve_services
from cspkit.config.loader import get_settings
from cspkit.generator.core import generate_csp
from cspkit.generator.options import GenerationOptions

logger = structlog.get_logger()

ENFORCE_HEADER = "Content-Security-Policy"
REPORT_ONLY_HEADER = "Content-Security-Policy-Report-Only"


class CSPHeaderMiddleware(BaseHTTPMiddleware):
    """Generate a nonce-bearing policy for every response.

    - Services come from ``services`` or CSPKIT_HEADER_SERVICES
    - The nonce is exposed as ``request.state.csp_nonce`` for templates
    - Production enforces the policy; other environments use Report-Only
    """

    def __init__(
        self,
        app: ASGIApp,
        services: Sequence[Any] | None = None,
        **options: Any,
    ) -> None:
        super().__init__(app)
        self._services = services
        self._options = options

    def _resolve(self) -> list[Any]:
        if self._services is not None:
            return list(self._services)
        services, unknown = resolve_services(get_settings().header_services)
        if unknown:
            logger.warning("header_services_unknown", services=unknown)
        return services

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = get_settings()
        environment = self._options.get("environment") or settings.environment
        params = {
            "nonce": True,
            "report_uri": settings.report_uri or None,
            "nonce_length": settings.nonce_length,
            "nonce_encoding": settings.nonce_encoding,
            **self._options,
            "services": self._resolve(),
            "environment": environment,
        }
        result = generate_csp(GenerationOptions(**params))
        request.state.csp_nonce = result.nonce

        response = await call_next(request)

        header_name = ENFORCE_HEADER if environment == "production" else REPORT_ONLY_HEADER
        if result.header:
            response.headers[header_name] = result.header
        return response


def get_csp_nonce(request: Request) -> str:
    """Get the CSP nonce from request state."""
    return getattr(request.state, "csp_nonce", None) or ""
