"""Service catalog: the editable NDIS rate card.

Entries are grouped by ServiceCategory. Pricing uses the first active entry
of a category, falling back to the first entry. Every mutation validates the
whole resulting catalog before it is committed; a failed mutation leaves the
previous catalog in place.

The catalog is loaded once per calculation (``load_catalog``) and handed to
the engine as an immutable ``CatalogSnapshot``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import uuid
from collections import defaultdict
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, Union

from ndis_invoice.models import (
    CatalogFieldError,
    CatalogLoadError,
    CatalogValidationError,
    ServiceCatalogEntry,
    ServiceCategory,
)

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_RESOURCE = "data/services.json"


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def entry_to_dict(entry: ServiceCatalogEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "category": entry.category.value,
        "code": entry.code,
        "description": entry.description,
        "rate": float(entry.rate),
        "active": entry.active,
    }


def _parse_entry(item: Any, index: int, errors: list[CatalogFieldError]) -> Optional[ServiceCatalogEntry]:
    if isinstance(item, ServiceCatalogEntry):
        return item
    label = f"#{index}"
    if not isinstance(item, dict):
        errors.append(CatalogFieldError(label, "entry", "must be an object"))
        return None

    entry_id = str(item.get("id") or "").strip() or label
    ok = True

    try:
        category = ServiceCategory(item.get("category"))
    except ValueError:
        errors.append(CatalogFieldError(entry_id, "category", f"unknown category {item.get('category')!r}"))
        ok = False

    raw_rate = item.get("rate")
    try:
        if isinstance(raw_rate, bool) or raw_rate is None:
            raise InvalidOperation
        rate = Decimal(str(raw_rate))
        if not rate.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        errors.append(CatalogFieldError(entry_id, "rate", f"must be a number, got {raw_rate!r}"))
        ok = False

    if not ok:
        return None
    return ServiceCatalogEntry(
        id=entry_id,
        category=category,
        code=str(item.get("code") or "").strip(),
        description=str(item.get("description") or "").strip(),
        rate=rate,
        active=bool(item.get("active", True)),
    )


def entries_from_dicts(items: Any) -> list[ServiceCatalogEntry]:
    """Parse raw catalog rows. Malformed rows raise CatalogValidationError."""
    if not isinstance(items, list):
        raise CatalogValidationError([CatalogFieldError("catalog", "entries", "must be a JSON array")])
    errors: list[CatalogFieldError] = []
    entries = [_parse_entry(item, i, errors) for i, item in enumerate(items)]
    if errors:
        raise CatalogValidationError(errors)
    return [e for e in entries if e is not None]


def parse_catalog_json(text: str) -> list[ServiceCatalogEntry]:
    try:
        items = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogValidationError([CatalogFieldError("catalog", "json", str(e))]) from None
    return entries_from_dicts(items)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_entry(entry: ServiceCatalogEntry) -> list[CatalogFieldError]:
    errors = []
    if not entry.code.strip():
        errors.append(CatalogFieldError(entry.id, "code", "Code is required"))
    if not entry.description.strip():
        errors.append(CatalogFieldError(entry.id, "description", "Description is required"))
    if entry.rate < 0:
        errors.append(CatalogFieldError(entry.id, "rate", f"Rate must be >= 0, got {entry.rate}"))
    return errors


def validate_catalog(entries: Iterable[ServiceCatalogEntry]) -> list[CatalogFieldError]:
    """Check every entry plus uniqueness of id and of (category, code)."""
    errors: list[CatalogFieldError] = []
    seen_ids: set[str] = set()
    seen_codes: set[tuple[ServiceCategory, str]] = set()
    for entry in entries:
        errors.extend(validate_entry(entry))
        if entry.id in seen_ids:
            errors.append(CatalogFieldError(entry.id, "id", "Duplicate id"))
        seen_ids.add(entry.id)
        key = (entry.category, entry.code.strip().lower())
        if entry.code.strip() and key in seen_codes:
            errors.append(CatalogFieldError(
                entry.id, "code",
                f"Duplicate code '{entry.code}' in category '{entry.category.value}'",
            ))
        seen_codes.add(key)
    return errors


# ---------------------------------------------------------------------------
# Snapshot and mutable catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable view of the catalog used for one calculation pass."""
    entries: tuple[ServiceCatalogEntry, ...] = ()

    def by_category(self) -> dict[ServiceCategory, list[ServiceCatalogEntry]]:
        grouped: dict[ServiceCategory, list[ServiceCatalogEntry]] = defaultdict(list)
        for entry in self.entries:
            grouped[entry.category].append(entry)
        return {category: grouped.get(category, []) for category in ServiceCategory}

    def resolve(self, category: ServiceCategory) -> Optional[ServiceCatalogEntry]:
        """First active entry of ``category``, else its first entry, else None."""
        candidates = [e for e in self.entries if e.category == category]
        for entry in candidates:
            if entry.active:
                return entry
        if candidates:
            logger.warning(
                "No active catalog entry for '%s'; falling back to inactive '%s'",
                category.value, candidates[0].code,
            )
            return candidates[0]
        return None

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entry_to_dict(e) for e in self.entries]


def new_entry(category: ServiceCategory = ServiceCategory.WEEKDAY) -> ServiceCatalogEntry:
    """Blank entry for an editor; it does not validate until code and description are set."""
    return ServiceCatalogEntry(
        id=str(uuid.uuid4()),
        category=category,
        code="",
        description="",
        rate=Decimal("0"),
        active=True,
    )


class ServiceCatalog:
    """Single-writer owner of the rate card."""

    def __init__(self, entries: Iterable[ServiceCatalogEntry] = ()):
        entries = list(entries)
        errors = validate_catalog(entries)
        if errors:
            raise CatalogValidationError(errors)
        self._snapshot = CatalogSnapshot(tuple(entries))

    @classmethod
    def from_snapshot(cls, snapshot: CatalogSnapshot) -> "ServiceCatalog":
        return cls(snapshot.entries)

    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def entries(self) -> tuple[ServiceCatalogEntry, ...]:
        return self._snapshot.entries

    def get(self, entry_id: str) -> ServiceCatalogEntry:
        for entry in self._snapshot.entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(f"No catalog entry with id '{entry_id}'")

    def _commit(self, entries: list[ServiceCatalogEntry]) -> None:
        errors = validate_catalog(entries)
        if errors:
            raise CatalogValidationError(errors)
        self._snapshot = CatalogSnapshot(tuple(entries))

    def add(self, entry: ServiceCatalogEntry) -> ServiceCatalogEntry:
        self._commit([*self._snapshot.entries, entry])
        logger.debug("Added catalog entry %s (%s)", entry.id, entry.code)
        return entry

    def update(self, entry: ServiceCatalogEntry) -> ServiceCatalogEntry:
        self.get(entry.id)
        self._commit([entry if e.id == entry.id else e for e in self._snapshot.entries])
        logger.debug("Updated catalog entry %s", entry.id)
        return entry

    def set_active(self, entry_id: str, active: bool) -> ServiceCatalogEntry:
        return self.update(replace(self.get(entry_id), active=active))

    def delete(self, entry_id: str) -> ServiceCatalogEntry:
        removed = self.get(entry_id)
        self._commit([e for e in self._snapshot.entries if e.id != entry_id])
        logger.debug("Deleted catalog entry %s", entry_id)
        return removed

    def import_entries(self, items: Iterable[Union[dict, ServiceCatalogEntry]]) -> CatalogSnapshot:
        """Replace the whole catalog. Nothing changes unless every row is valid."""
        self._commit(entries_from_dicts(list(items)))
        logger.info("Imported catalog with %d entries", len(self._snapshot.entries))
        return self._snapshot

    def import_json(self, text: str) -> CatalogSnapshot:
        return self.import_entries(parse_catalog_json(text))

    def export_entries(self) -> list[dict[str, Any]]:
        return self._snapshot.to_dicts()

    def export_json(self) -> str:
        return json.dumps(self.export_entries(), indent=2)


# ---------------------------------------------------------------------------
# Loading and persistence
# ---------------------------------------------------------------------------


class CatalogStore(Protocol):
    """Persistence for the locally edited catalog."""

    async def read(self) -> Optional[list[dict[str, Any]]]:
        """Saved catalog rows, or None when no local override exists."""
        ...

    async def write(self, items: list[dict[str, Any]]) -> None:
        ...


class JsonFileCatalogStore:
    """Catalog override kept in a JSON file. Writes replace the file atomically."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Optional[list[dict[str, Any]]]:
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _write(self, items: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise

    async def read(self) -> Optional[list[dict[str, Any]]]:
        return await asyncio.to_thread(self._read)

    async def write(self, items: list[dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write, items)


def default_catalog_items() -> list[dict[str, Any]]:
    text = resources.files("ndis_invoice").joinpath(DEFAULT_CATALOG_RESOURCE).read_text(encoding="utf-8")
    return json.loads(text)


def default_catalog() -> CatalogSnapshot:
    return CatalogSnapshot(tuple(entries_from_dicts(default_catalog_items())))


async def load_catalog(store: Optional[CatalogStore] = None) -> CatalogSnapshot:
    """Read the local override if one exists, else the packaged default catalog."""
    try:
        items = await store.read() if store is not None else None
        source = "local override"
        if items is None:
            items = await asyncio.to_thread(default_catalog_items)
            source = "default dataset"
        entries = entries_from_dicts(items)
    except (OSError, ValueError, CatalogValidationError) as e:
        raise CatalogLoadError(f"Failed to load service catalog: {e}") from e

    errors = validate_catalog(entries)
    if errors:
        raise CatalogLoadError(f"Failed to load service catalog: {CatalogValidationError(errors)}")
    logger.debug("Loaded %d catalog entries from %s", len(entries), source)
    return CatalogSnapshot(tuple(entries))


async def save_catalog(store: CatalogStore, catalog: ServiceCatalog) -> None:
    await store.write(catalog.export_entries())
