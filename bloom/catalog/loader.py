"""Load, validate, and hot-reload the Bloom reference catalogue.

The catalogue lives in ``catalog.yaml`` alongside this module and holds the
global reference data: subscription plans, the telehealth provider directory
and the article library.  It is loaded once and cached; call
``reload_catalog()`` to re-read from disk without a restart.

Usage::

    from bloom.catalog import get_catalog

    catalog = get_catalog()
    plan = catalog.plan("plan_premium")
    provider = catalog.provider("prov-1")
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bloom.models.base import utc_now
from bloom.models.billing import Plan
from bloom.models.content import Article
from bloom.models.telehealth import Provider

logger = logging.getLogger("bloom.catalog")

# Path to the YAML file sitting next to this module
_CATALOG_PATH = Path(__file__).parent / "catalog.yaml"


@dataclass
class Catalog:
    """Validated, in-memory reference data.

    Attributes:
        version:   Catalogue schema version string.
        plans:     Subscription plans in declaration order.
        providers: Telehealth provider directory with concrete slot times.
        articles:  Article library.
        loaded_at: Anchor used to turn slot offsets into timestamps.
    """

    version: str
    plans: list[Plan]
    providers: list[Provider]
    articles: list[Article]
    loaded_at: datetime = field(default_factory=utc_now)

    def plan(self, plan_id: str) -> Plan | None:
        return next((p for p in self.plans if p.id == plan_id), None)

    def provider(self, provider_id: str) -> Provider | None:
        return next((p for p in self.providers if p.id == provider_id), None)

    def article(self, article_id: str) -> Article | None:
        return next((a for a in self.articles if a.id == article_id), None)


class CatalogValidationError(ValueError):
    """Raised when catalog.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError:      If the file does not exist.
        CatalogValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise CatalogValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict, anchor: datetime) -> Catalog:
    """Validate the raw YAML dict and construct a Catalog.

    Every section is validated in full so that one run reports all problems.

    Args:
        raw:    Parsed YAML dict.
        anchor: Reference time for provider slot offsets.

    Raises:
        CatalogValidationError: If any entry is missing fields or invalid.
    """
    errors: list[str] = []

    def _build(section: str, model: type, transform=None) -> list[Any]:
        items = raw.get(section) or []
        if not isinstance(items, list):
            errors.append(f"'{section}' must be a list")
            return []
        built = []
        seen: set[str] = set()
        for idx, item in enumerate(items):
            if not isinstance(item, dict):
                errors.append(f"{section}[{idx}] must be a mapping")
                continue
            data = transform(dict(item)) if transform else item
            try:
                obj = model.model_validate(data)
            except ValidationError as exc:
                errors.append(f"{section}[{idx}]: {exc.errors()[0]['msg']}")
                continue
            if obj.id in seen:
                errors.append(f"{section}[{idx}]: duplicate id '{obj.id}'")
                continue
            seen.add(obj.id)
            built.append(obj)
        return built

    def _slots(item: dict) -> dict:
        offsets = item.pop("slot_offsets_hours", []) or []
        try:
            item["available_slots"] = [anchor + timedelta(hours=float(h)) for h in offsets]
        except (TypeError, ValueError):
            errors.append(f"provider '{item.get('id')}' has non-numeric slot offsets")
            item["available_slots"] = []
        return item

    plans = _build("plans", Plan)
    providers = _build("providers", Provider, _slots)
    articles = _build("articles", Article)

    if not plans:
        errors.append("'plans' section is missing or empty")

    if errors:
        raise CatalogValidationError(
            f"catalog.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return Catalog(
        version=str(raw.get("version", "1.0")),
        plans=plans,
        providers=providers,
        articles=articles,
        loaded_at=anchor,
    )


def load_catalog(path: Path | None = None, anchor: datetime | None = None) -> Catalog:
    """Load and validate the catalogue from disk.

    Args:
        path:   Override path to YAML.  Uses the bundled catalog.yaml by default.
        anchor: Time provider slot offsets are measured from (defaults to now).
    """
    target = path or _CATALOG_PATH
    raw = _load_yaml(target)
    catalog = _validate_and_build(raw, anchor or utc_now())
    logger.info(
        "Loaded catalog v%s from %s (%d plans, %d providers, %d articles)",
        catalog.version, target, len(catalog.plans), len(catalog.providers), len(catalog.articles),
    )
    return catalog


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_catalog: Catalog | None = None
_catalog_lock = threading.Lock()


def get_catalog() -> Catalog:
    """Return the global Catalog, loading it on first call.  Thread-safe."""
    global _catalog
    if _catalog is None:
        with _catalog_lock:
            if _catalog is None:  # double-checked locking
                _catalog = load_catalog()
    return _catalog


def reload_catalog(path: Path | None = None) -> Catalog:
    """Reload the catalogue and replace the global singleton.

    If validation fails the old catalogue is retained and the error re-raised.
    """
    global _catalog
    new_catalog = load_catalog(path)  # validate before acquiring lock
    with _catalog_lock:
        old_version = _catalog.version if _catalog else "none"
        _catalog = new_catalog
    logger.info("Reloaded catalog: %s → %s", old_version, new_catalog.version)
    return new_catalog
