"""CSP generation engine."""

from cspkit.generator.core import (
    CSPResult,
    generate_csp,
    generate_csp_header,
    generate_report_only_csp,
)
from cspkit.generator.directives import (
    add_nonce_to_directives,
    add_self_directive,
    directives_to_header,
    merge_directives,
    parse_csp,
    validate_directives,
)
from cspkit.generator.nonce import RandomSource, generate_nonce
from cspkit.generator.options import GenerationOptions, OptionsOverlay
from cspkit.generator.services import (
    ConfigurableService,
    ConfiguredFragment,
    Deprecation,
    ServiceDefinition,
    ValidationResult,
    create_configurable_service,
    define_service,
    is_csp_service,
)

__all__ = [
    "CSPResult",
    "ConfigurableService",
    "ConfiguredFragment",
    "Deprecation",
    "GenerationOptions",
    "OptionsOverlay",
    "RandomSource",
    "ServiceDefinition",
    "ValidationResult",
    "add_nonce_to_directives",
    "add_self_directive",
    "create_configurable_service",
    "define_service",
    "directives_to_header",
    "generate_csp",
    "generate_csp_header",
    "generate_nonce",
    "generate_report_only_csp",
    "is_csp_service",
    "merge_directives",
    "parse_csp",
    "validate_directives",
]
