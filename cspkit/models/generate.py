"""Pydantic models for the generation and catalogue API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Request body for POST /api/generate-csp."""

    services: list[str] = Field(default_factory=list)
    nonce: bool | str = False
    # Directive mapping or a raw CSP string
    additional_rules: dict[str, list[str]] | str | None = None
    report_uri: str | None = None
    include_self: bool = True
    unsafe_inline: bool = False
    unsafe_eval: bool = False
    environment: Literal["development", "production"] | None = None


class GenerateResponse(BaseModel):
    """Response body for POST /api/generate-csp."""

    header: str
    directives: dict[str, list[str]]
    report_only_header: str
    included_services: list[str]
    unknown_services: list[str]
    warnings: list[str]
    nonce: str | None = None


class DeprecationInfo(BaseModel):
    since: str
    alternative: str
    message: str


class ServiceSummary(BaseModel):
    """Catalogue entry as returned by the services endpoints."""

    id: str
    name: str
    category: str
    description: str
    website: str
    official_docs: list[str]
    aliases: list[str]
    directives: dict[str, list[str]]
    requires_dynamic: bool
    requires_nonce: bool
    notes: str | None = None
    conflicts: list[str] = Field(default_factory=list)
    deprecated: DeprecationInfo | None = None
