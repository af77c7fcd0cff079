"""CSP generation and service catalogue endpoints."""

from __future__ import annotations

from dataclasses import replace

import structlog
from fastapi import APIRouter, HTTPException

from cspkit.catalog.registry import get_service, resolve_services, search_services
from cspkit.generator.core import generate_csp
from cspkit.generator.directives import parse_csp
from cspkit.generator.options import GenerationOptions
from cspkit.generator.services import ServiceDefinition
from cspkit.models.generate import DeprecationInfo, GenerateRequest, GenerateResponse, ServiceSummary

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["csp"])


def _summarize(service: ServiceDefinition) -> ServiceSummary:
    deprecated = None
    if service.deprecated is not None:
        deprecated = DeprecationInfo(
            since=service.deprecated.since,
            alternative=service.deprecated.alternative,
            message=service.deprecated.message,
        )
    return ServiceSummary(
        id=service.id,
        name=service.name,
        category=service.category,
        description=service.description,
        website=service.website,
        official_docs=list(service.official_docs),
        aliases=list(service.aliases),
        directives=service.directive_map(),
        requires_dynamic=service.requires_dynamic,
        requires_nonce=service.requires_nonce,
        notes=service.notes,
        conflicts=list(service.conflicts),
        deprecated=deprecated,
    )


@router.post("/generate-csp", response_model=GenerateResponse)
async def generate(body: GenerateRequest):
    """Resolve service ids from the catalogue and generate a policy."""
    services, unknown = resolve_services(body.services)

    additional_rules = body.additional_rules or {}
    if isinstance(additional_rules, str):
        additional_rules = parse_csp(additional_rules)

    options = GenerationOptions(
        services=services,
        nonce=body.nonce,
        additional_rules=additional_rules,
        report_uri=body.report_uri,
        include_self=body.include_self,
        unsafe_inline=body.unsafe_inline,
        unsafe_eval=body.unsafe_eval,
        environment=body.environment,
    )
    result = generate_csp(options)

    if unknown:
        logger.info("unknown_services_requested", services=unknown)
        result = replace(
            result,
            unknown_services=unknown,
            warnings=[*result.warnings, f"Unknown services: {', '.join(unknown)}"],
        )
    return result.to_dict()


@router.get("/services", response_model=list[ServiceSummary])
async def list_services(q: str = ""):
    """List catalogue services, optionally filtered by a search query."""
    return [_summarize(service) for service in search_services(q)]


@router.get("/services/{service_id}", response_model=ServiceSummary)
async def get_service_detail(service_id: str):
    """Get one service by id or alias."""
    service = get_service(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return _summarize(service)
