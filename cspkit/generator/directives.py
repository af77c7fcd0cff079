"""Pure-function CSP directive algebra: merge, self/nonce injection, serialization, lint."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

CSPDirectives = dict[str, list[str]]

SELF = "'self'"
UNSAFE_INLINE = "'unsafe-inline'"
UNSAFE_EVAL = "'unsafe-eval'"

# Directives that receive 'self' when some contributor already populated them
SELF_DIRECTIVES = ("script-src", "style-src", "img-src", "connect-src", "font-src")

NONCE_DIRECTIVES = ("script-src", "style-src")

# Serialization order. Anything not listed here is never emitted, including
# frame-ancestors, base-uri and upgrade-insecure-requests which some catalogue
# entries declare. Extend this tuple to emit them.
DIRECTIVE_ORDER = (
    "script-src",
    "style-src",
    "img-src",
    "connect-src",
    "font-src",
    "object-src",
    "media-src",
    "frame-src",
    "child-src",
    "worker-src",
    "manifest-src",
    "form-action",
    "report-uri",
    "report-to",
)


def parse_csp(csp_string: str) -> CSPDirectives:
    """Parse a CSP string into {directive: [values]} dict.

    Repeated values within one directive are collapsed.

    Example:
        >>> parse_csp("script-src 'self' https:; img-src data:")
        {"script-src": ["'self'", "https:"], "img-src": ["data:"]}
    """
    result: CSPDirectives = {}
    if not csp_string or not csp_string.strip():
        return result
    for part in csp_string.split(";"):
        tokens = part.split()
        if not tokens:
            continue
        directive = tokens[0].lower()
        result[directive] = list(dict.fromkeys(tokens[1:]))
    return result


def merge_directives(*fragments: Mapping[str, Iterable[str]] | None) -> CSPDirectives:
    """Union any number of directive fragments, left to right.

    Each directive accumulates into an insertion-ordered set, so the first
    occurrence of a source fixes its position and repeats are dropped.
    Empty or missing source lists contribute nothing, not even the key.
    """
    accumulator: dict[str, dict[str, None]] = {}
    for fragment in fragments:
        if not fragment:
            continue
        for directive, values in fragment.items():
            if not values:
                continue
            sources = accumulator.setdefault(directive, {})
            for value in values:
                sources.setdefault(value, None)
    return {directive: list(sources) for directive, sources in accumulator.items() if sources}


def add_self_directive(directives: Mapping[str, list[str]]) -> CSPDirectives:
    """Prepend 'self' to the common fetch directives that are already present.

    Absent directives are not created: a policy built only from frame-src
    sources gets no script-src at all. Callers that want a baseline must
    supply it through additional rules.
    """
    result = {directive: list(values) for directive, values in directives.items()}
    for directive in SELF_DIRECTIVES:
        values = result.get(directive)
        if values and SELF not in values:
            result[directive] = [SELF, *values]
    return result


def add_nonce_to_directives(directives: Mapping[str, list[str]], nonce: str) -> CSPDirectives:
    """Append 'nonce-<token>' to script-src and style-src when present."""
    result = {directive: list(values) for directive, values in directives.items()}
    token = f"'nonce-{nonce}'"
    for directive in NONCE_DIRECTIVES:
        values = result.get(directive)
        if values and token not in values:
            values.append(token)
    return result


def directives_to_header(directives: Mapping[str, list[str]]) -> str:
    """Serialize directives in DIRECTIVE_ORDER, skipping empty and unknown ones.

    Example:
        >>> directives_to_header({"img-src": ["data:"], "script-src": ["'self'"]})
        "script-src 'self'; img-src data:"
    """
    parts = []
    for directive in DIRECTIVE_ORDER:
        values = directives.get(directive)
        if values:
            parts.append(f"{directive} {' '.join(values)}")
    return "; ".join(parts)


def validate_directives(directives: Mapping[str, list[str]]) -> list[str]:
    """Lint a final directive map. Returns warnings, never raises."""
    warnings: list[str] = []
    for directive, values in directives.items():
        if not values:
            continue
        if UNSAFE_INLINE in values:
            warnings.append(f"{directive} contains 'unsafe-inline' which reduces security")
        if UNSAFE_EVAL in values:
            warnings.append(f"{directive} contains 'unsafe-eval' which reduces security")
        if any("*" in value for value in values):
            warnings.append(f"{directive} contains wildcards which may be overly permissive")

    if not directives.get("script-src"):
        warnings.append("No script-src directive specified")
    if not directives.get("style-src"):
        warnings.append("No style-src directive specified")
    return warnings
