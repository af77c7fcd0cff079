"""CSP generation: walk services, merge directives, post-process, lint, serialize."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import structlog

from cspkit.config.loader import get_settings
from cspkit.generator.directives import (
    UNSAFE_EVAL,
    UNSAFE_INLINE,
    CSPDirectives,
    add_nonce_to_directives,
    add_self_directive,
    directives_to_header,
    merge_directives,
    validate_directives,
)
from cspkit.generator.nonce import generate_nonce
from cspkit.generator.options import GenerationOptions
from cspkit.generator.services import (
    CONFIGURED_SERVICE_ID,
    ConfiguredFragment,
    InvalidEntry,
    ServiceDefinition,
    classify_entry,
    run_validator,
)

logger = structlog.get_logger()

INVALID_SERVICE_WARNING = "Invalid service object provided"
UNSAFE_INLINE_WARNING = "Using 'unsafe-inline' is not recommended for production"
UNSAFE_EVAL_WARNING = "Using 'unsafe-eval' is not recommended for production"


@dataclass(frozen=True)
class CSPResult:
    """Outcome of one generation call."""

    header: str
    directives: CSPDirectives
    report_only_header: str
    included_services: list[str] = field(default_factory=list)
    unknown_services: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    nonce: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header,
            "directives": {name: list(values) for name, values in self.directives.items()},
            "report_only_header": self.report_only_header,
            "included_services": list(self.included_services),
            "unknown_services": list(self.unknown_services),
            "warnings": list(self.warnings),
            "nonce": self.nonce,
        }


def _normalize_input(services_or_options: Any) -> GenerationOptions:
    if isinstance(services_or_options, GenerationOptions):
        return services_or_options
    if isinstance(services_or_options, (list, tuple)):
        return GenerationOptions(services=list(services_or_options))
    if isinstance(services_or_options, Mapping):
        return GenerationOptions.model_validate(dict(services_or_options))
    raise TypeError(
        "generate_csp expects a list of services or GenerationOptions, "
        f"got {type(services_or_options).__name__}"
    )


def _append_if_present(directives: CSPDirectives, directive: str, source: str) -> None:
    values = directives.get(directive)
    if values and source not in values:
        values.append(source)


def _service_diagnostics(service: ServiceDefinition, directives: CSPDirectives) -> list[str]:
    """Warnings from the service's validator hook and deprecation notice."""
    messages: list[str] = []
    try:
        hook_warnings, hook_errors = run_validator(service, directives)
    except Exception as exc:
        logger.warning("service_validator_failed", service=service.id, error=str(exc))
        hook_warnings, hook_errors = [], [f"validator failed: {exc}"]
    messages.extend(f"[{service.id}] {message}" for message in hook_warnings)
    messages.extend(f"[{service.id}] Error: {message}" for message in hook_errors)

    if service.deprecated is not None:
        notice = service.deprecated
        messages.append(
            f"[{service.id}] Deprecated since {notice.since}: {notice.message} "
            f"Use '{notice.alternative}' instead."
        )
    return messages


def generate_csp(services_or_options: Any) -> CSPResult:
    """Generate a CSP header from services and options.

    Accepts a list of services (ServiceDefinition objects, service mappings
    or configured fragments) or a GenerationOptions / options dict.
    Per-service problems become warnings; only an unusable input shape raises.
    """
    options = _normalize_input(services_or_options)
    environment = options.environment or get_settings().environment
    options = options.for_environment(environment)

    warnings: list[str] = []
    included: list[str] = []
    fragments: list[CSPDirectives] = []
    seen: set[str] = set()

    for value in options.services:
        entry = classify_entry(value)

        if isinstance(entry, ConfiguredFragment):
            fragments.append(entry.directive_map())
            if CONFIGURED_SERVICE_ID not in included:
                included.append(CONFIGURED_SERVICE_ID)
            continue

        if isinstance(entry, InvalidEntry):
            logger.warning("service_skipped", reason="invalid", value_type=type(entry.value).__name__)
            warnings.append(INVALID_SERVICE_WARNING)
            continue

        service = entry.service

        conflict = next((other for other in service.conflicts if other in seen), None)
        if conflict is not None:
            logger.warning("service_skipped", reason="conflict", service=service.id, conflicts_with=conflict)
            warnings.append(f"Service '{service.id}' conflicts with '{conflict}' and was skipped")
            continue

        if service.id in seen:
            logger.warning("service_skipped", reason="duplicate", service=service.id)
            warnings.append(f"Service '{service.id}' was included more than once; duplicate skipped")
            continue

        seen.add(service.id)
        included.append(service.id)
        directives = service.directive_map()
        fragments.append(directives)
        warnings.extend(_service_diagnostics(service, directives))

    merged = merge_directives(*fragments, options.additional_rules)

    if options.include_self:
        merged = add_self_directive(merged)

    if options.unsafe_inline:
        _append_if_present(merged, "script-src", UNSAFE_INLINE)
        _append_if_present(merged, "style-src", UNSAFE_INLINE)
        warnings.append(UNSAFE_INLINE_WARNING)

    if options.unsafe_eval:
        _append_if_present(merged, "script-src", UNSAFE_EVAL)
        warnings.append(UNSAFE_EVAL_WARNING)

    nonce: str | None = None
    if options.nonce:
        if isinstance(options.nonce, str):
            nonce = options.nonce
        else:
            nonce = generate_nonce(
                options.nonce_length,
                options.nonce_encoding,
                source=options.random_source,
                on_insecure=warnings.append,
            )
        merged = add_nonce_to_directives(merged, nonce)

    if options.report_uri:
        merged["report-uri"] = [options.report_uri]

    warnings.extend(validate_directives(merged))
    header = directives_to_header(merged)

    logger.debug(
        "csp_generated",
        environment=environment,
        services=len(included),
        warnings=len(warnings),
    )

    return CSPResult(
        header=header,
        directives=merged,
        report_only_header=header,
        included_services=included,
        unknown_services=[],
        warnings=warnings,
        nonce=nonce,
    )


def generate_csp_header(services_or_options: Any) -> str:
    """Generate only the header string."""
    return generate_csp(services_or_options).header


def generate_report_only_csp(services_or_options: Any) -> CSPResult:
    """Generate a result meant for the Content-Security-Policy-Report-Only header.

    The content is identical; only the header name the caller uses differs.
    """
    result = generate_csp(services_or_options)
    return replace(result, header=result.report_only_header)
