"""
CSP Kit - Content-Security-Policy generation from third-party service definitions
"""

__version__ = "0.1.0"

from cspkit.generator import (
    CSPResult,
    GenerationOptions,
    ServiceDefinition,
    generate_csp,
    generate_csp_header,
    generate_nonce,
    generate_report_only_csp,
)

__all__ = [
    "CSPResult",
    "GenerationOptions",
    "ServiceDefinition",
    "generate_csp",
    "generate_csp_header",
    "generate_nonce",
    "generate_report_only_csp",
]
