"""
Route catalog accessors.

The catalog is a local JSON file (default: `data/catalogs/routes.json`) that
contains running routes with their static attributes and feature tags. We
validate it into typed Pydantic models so downstream scoring code can assume a
consistent shape.

Accessors expose one operation, `list_eligible_routes()`, which drops disabled
and archived routes. Any failure to read the backing store surfaces as
`CatalogUnavailable`; an empty catalog is a valid (empty) result.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from runscore.core.env import resolve_project_path
from runscore.core.errors import CatalogUnavailable
from runscore.domain.models import Route

logger = logging.getLogger(__name__)

_ROUTES_ADAPTER = TypeAdapter(list[Route])


def load_routes(path: str | Path) -> list[Route]:
    """Load and validate a route catalog JSON file (all statuses)."""
    resolved = resolve_project_path(path)
    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogUnavailable(f"Cannot read route catalog at {resolved}: {e}") from e
    except ValueError as e:
        raise CatalogUnavailable(f"Route catalog at {resolved} is not valid JSON: {e}") from e
    try:
        return _ROUTES_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise CatalogUnavailable(f"Route catalog at {resolved} failed validation: {e}") from e


def eligible(routes: list[Route]) -> list[Route]:
    """Keep only routes that may be recommended."""
    return [r for r in routes if r.status == "active"]


class JsonRouteCatalog:
    """Reads the catalog from disk on every call (no cross-request state)."""

    def __init__(self, path: str | Path):
        self._path = path

    @property
    def path(self) -> str | Path:
        return self._path

    def list_eligible_routes(self) -> list[Route]:
        routes = load_routes(self._path)
        result = eligible(routes)
        logger.debug("Loaded %d routes (%d eligible) from %s", len(routes), len(result), self._path)
        return result


class InMemoryRouteCatalog:
    """Serves a fixed list of routes (embedding and tests)."""

    def __init__(self, routes: list[Route]):
        self._routes = tuple(routes)

    def list_eligible_routes(self) -> list[Route]:
        return eligible(list(self._routes))
