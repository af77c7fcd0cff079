"""Service catalogue loaded from YAML, with id/alias lookup."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog
import yaml

from cspkit.config.loader import get_settings
from cspkit.generator.services import ServiceDefinition

logger = structlog.get_logger()

# Cache loaded catalogue
_catalog: dict[str, ServiceDefinition] | None = None
_aliases: dict[str, str] = {}


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        logger.error("catalog_not_found", path=str(path))
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_catalog(path: str | Path | None = None) -> dict[str, ServiceDefinition]:
    """Load service definitions, caching after first load.

    Entries that do not build into a ServiceDefinition are logged and skipped.
    """
    global _catalog, _aliases
    if _catalog is not None and path is None:
        return _catalog

    raw = _load_yaml(Path(path or get_settings().catalog_file))
    catalog: dict[str, ServiceDefinition] = {}
    aliases: dict[str, str] = {}
    for service_id, entry in raw.items():
        if not isinstance(entry, dict):
            logger.warning("catalog_entry_invalid", service=service_id, reason="not a mapping")
            continue
        try:
            service = ServiceDefinition.from_mapping({**entry, "id": str(service_id)})
        except (TypeError, ValueError) as exc:
            logger.warning("catalog_entry_invalid", service=service_id, reason=str(exc))
            continue
        catalog[service.id] = service
        for alias in service.aliases:
            aliases[alias.lower()] = service.id

    _catalog, _aliases = catalog, aliases
    logger.info("catalog_loaded", services=len(catalog), aliases=len(aliases))
    return catalog


def reset_catalog_cache() -> None:
    """Reset the catalogue cache (for testing)."""
    global _catalog, _aliases
    _catalog = None
    _aliases = {}


def get_service(id_or_alias: str) -> ServiceDefinition | None:
    """Look up a service by id or alias, case-insensitively."""
    catalog = load_catalog()
    key = id_or_alias.strip().lower()
    if key in catalog:
        return catalog[key]
    service_id = _aliases.get(key)
    return catalog.get(service_id) if service_id else None


def resolve_services(ids: Iterable[str]) -> tuple[list[ServiceDefinition], list[str]]:
    """Resolve ids/aliases to services. Returns (services, unknown ids) in input order."""
    services: list[ServiceDefinition] = []
    unknown: list[str] = []
    for service_id in ids:
        service = get_service(service_id)
        if service is None:
            unknown.append(service_id)
        else:
            services.append(service)
    return services, unknown


def search_services(query: str) -> list[ServiceDefinition]:
    """Case-insensitive substring search over id, name, aliases, category and description."""
    needle = query.strip().lower()
    catalog = load_catalog()
    if not needle:
        return list(catalog.values())
    matches = []
    for service in catalog.values():
        haystack = [service.id, service.name, service.category, service.description, *service.aliases]
        if any(needle in text.lower() for text in haystack):
            matches.append(service)
    return matches
