"""Service definition types and classification of generator input entries."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from cspkit.generator.directives import CSPDirectives, merge_directives

CONFIGURED_SERVICE_ID = "custom-configured-service"

REQUIRED_FIELDS = (
    "id",
    "name",
    "category",
    "description",
    "website",
    "official_docs",
    "directives",
)


@dataclass(frozen=True, slots=True)
class Deprecation:
    """Deprecation notice attached to a service."""

    since: str
    alternative: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a service's own validator hook."""

    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()


Validator = Callable[[CSPDirectives], "ValidationResult | Mapping[str, Any] | None"]


def _string_tuple(values: Any, label: str) -> tuple[str, ...]:
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise TypeError(f"{label} must be a list of strings, got {type(values).__name__}")
    items = tuple(values)
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f"{label} must only contain strings, got {type(item).__name__}")
    return items


def _freeze_directives(directives: Mapping[str, Any]) -> Mapping[str, tuple[str, ...]]:
    if not isinstance(directives, Mapping):
        raise TypeError(f"directives must be a mapping, got {type(directives).__name__}")
    return MappingProxyType({name: _string_tuple(values, name) for name, values in directives.items()})


@dataclass(frozen=True, slots=True)
class ServiceDefinition:
    """A third-party integration and the CSP sources it needs.

    Read-only once built: directive lists are frozen into tuples behind a
    read-only mapping.
    """

    id: str
    name: str
    category: str
    directives: Mapping[str, tuple[str, ...]]
    description: str = ""
    website: str = ""
    official_docs: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    requires_dynamic: bool = False
    requires_nonce: bool = False
    notes: str | None = None
    last_updated: str | None = None
    verified_at: str | None = None
    dependencies: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()
    deprecated: Deprecation | None = None
    validator: Validator | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "directives", _freeze_directives(self.directives))
        for name in ("official_docs", "aliases", "dependencies", "conflicts"):
            object.__setattr__(self, name, _string_tuple(getattr(self, name), name))
        if isinstance(self.deprecated, Mapping):
            object.__setattr__(self, "deprecated", Deprecation(**self.deprecated))
        elif self.deprecated is not None and not isinstance(self.deprecated, Deprecation):
            raise TypeError(f"deprecated must be a mapping, got {type(self.deprecated).__name__}")

    def directive_map(self) -> CSPDirectives:
        """Mutable copy of the directives for merging."""
        return {name: list(values) for name, values in self.directives.items()}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ServiceDefinition:
        """Build from a plain mapping (YAML/JSON), ignoring unknown keys."""
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        return cls(**known)


@dataclass(frozen=True, slots=True)
class ConfiguredFragment:
    """Directives produced by a configurable service, without a service id."""

    directives: Mapping[str, tuple[str, ...]]
    source: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "directives", _freeze_directives(self.directives))

    def directive_map(self) -> CSPDirectives:
        return {name: list(values) for name, values in self.directives.items()}


@dataclass(frozen=True, slots=True)
class ConfigurableService(ServiceDefinition):
    """A service whose directives depend on caller options."""

    configurator: Callable[..., Mapping[str, Any]] | None = field(default=None, compare=False, repr=False)

    def configure(self, **options: Any) -> ConfiguredFragment:
        """Return the base directives merged with the option-specific extras."""
        extra = self.configurator(**options) if self.configurator else {}
        return ConfiguredFragment(
            directives=merge_directives(self.directive_map(), extra or {}),
            source=self.id,
        )


def define_service(**fields: Any) -> ServiceDefinition:
    """Build a ServiceDefinition, failing fast on missing required fields."""
    for name in REQUIRED_FIELDS:
        if name not in fields:
            raise ValueError(f"Service {fields.get('id', 'unknown')} is missing required field: {name}")
    return ServiceDefinition(**fields)


def create_configurable_service(
    base: ServiceDefinition,
    configure_fn: Callable[..., Mapping[str, Any]],
) -> ConfigurableService:
    """Wrap ``base`` so ``configure(**options)`` yields a ConfiguredFragment.

    ``configure_fn`` returns extra directives for the given options; they are
    unioned with the base directives.
    """
    fields = {name: getattr(base, name) for name in ServiceDefinition.__dataclass_fields__}
    return ConfigurableService(**fields, configurator=configure_fn)


def is_csp_service(value: Any) -> bool:
    """True if ``value`` has the minimum service shape: str id/name/category and a directive mapping."""
    if isinstance(value, ServiceDefinition):
        return True
    if not isinstance(value, Mapping):
        return False
    return (
        isinstance(value.get("id"), str)
        and isinstance(value.get("name"), str)
        and isinstance(value.get("category"), str)
        and isinstance(value.get("directives"), Mapping)
    )


# ── Entry classification ────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FullService:
    """A well-formed service subject to conflict, duplicate and deprecation checks."""

    service: ServiceDefinition


@dataclass(frozen=True, slots=True)
class InvalidEntry:
    """Anything that is neither a service nor a configured fragment."""

    value: Any


Entry = FullService | ConfiguredFragment | InvalidEntry


def _has_id(value: Any) -> bool:
    if isinstance(value, Mapping):
        return "id" in value
    return hasattr(value, "id")


def _fragment_or_invalid(value: Any, directives: Mapping[str, Any]) -> Entry:
    try:
        return ConfiguredFragment(directives=directives)
    except TypeError:
        return InvalidEntry(value)


def classify_entry(value: Any) -> Entry:
    """Resolve one ``services`` list item into exactly one Entry variant."""
    if isinstance(value, ConfiguredFragment):
        return value
    if isinstance(value, ServiceDefinition):
        return FullService(value)

    if isinstance(value, Mapping):
        directives = value.get("directives")
        if isinstance(directives, Mapping) and not _has_id(value):
            return _fragment_or_invalid(value, directives)
        if is_csp_service(value):
            try:
                return FullService(ServiceDefinition.from_mapping(value))
            except (TypeError, ValueError):
                return InvalidEntry(value)
        return InvalidEntry(value)

    directives = getattr(value, "directives", None)
    if isinstance(directives, Mapping) and not _has_id(value):
        return _fragment_or_invalid(value, directives)
    return InvalidEntry(value)


def run_validator(service: ServiceDefinition, directives: CSPDirectives) -> tuple[list[str], list[str]]:
    """Call the service's validator hook and normalise its result to (warnings, errors)."""
    if service.validator is None:
        return [], []
    result = service.validator(directives)
    if result is None:
        return [], []
    if isinstance(result, Mapping):
        return list(result.get("warnings") or ()), list(result.get("errors") or ())
    return list(result.warnings), list(result.errors)
