"""Per-day schedule resolution.

A sparse override map (ISO date -> DaySchedule) replaces the default
schedule on individual days. Keys are canonicalized to YYYY-MM-DD on
every write and lookup.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ndis_invoice.dates import DateLike, iso_key
from ndis_invoice.models import DayRecord, DaySchedule


def normalize_overrides(overrides: Optional[Mapping[DateLike, DaySchedule]]) -> dict[str, DaySchedule]:
    """Rekey an override mapping by canonical ISO date."""
    if not overrides:
        return {}
    normalized: dict[str, DaySchedule] = {}
    for key, schedule in overrides.items():
        canonical = iso_key(key)
        if canonical in normalized:
            raise ValueError(f"Duplicate schedule override for {canonical}")
        normalized[canonical] = schedule
    return normalized


def _lookup(day: DateLike, default_schedule: DaySchedule, canonical: Mapping[str, DaySchedule]) -> DaySchedule:
    return canonical.get(iso_key(day), default_schedule)


def resolve_day_schedule(
    day: DateLike,
    default_schedule: DaySchedule,
    overrides: Optional[Mapping[DateLike, DaySchedule]] = None,
) -> DaySchedule:
    """Override for ``day`` if one exists, else the default. Map keys may be any DateLike."""
    return _lookup(day, default_schedule, normalize_overrides(overrides))


def billable_days(
    records: Iterable[DayRecord],
    default_schedule: DaySchedule,
    overrides: Optional[Mapping[DateLike, DaySchedule]] = None,
) -> list[tuple[DayRecord, DaySchedule]]:
    """Records that are billed, paired with their resolved schedule.

    Excluded days and days whose schedule has no hours are both dropped.
    """
    canonical = normalize_overrides(overrides)
    result = []
    for record in sorted(records, key=lambda r: r.date):
        if record.excluded:
            continue
        schedule = _lookup(record.date, default_schedule, canonical)
        if schedule.is_empty:
            continue
        result.append((record, schedule))
    return result
