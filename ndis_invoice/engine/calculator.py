"""Line-item aggregation and pricing.

Billable days are grouped into six buckets: weekday daytime, weekday
evening, weekday sleepover, Saturday, Sunday and public holiday. Only
weekdays split by time of day; weekend and holiday buckets take the
whole day's hours. Each non-empty bucket is priced against the catalog
snapshot, and one travel line item is added for the billable days.

All monetary calculations use Decimal; line totals are rounded to cents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ndis_invoice.catalog import CatalogSnapshot
from ndis_invoice.dates import DateLike
from ndis_invoice.engine.schedule import billable_days
from ndis_invoice.engine.travel import apportion_travel, daily_distances, format_breakdown, total_distance
from ndis_invoice.formatting import format_dates_list, format_quantity
from ndis_invoice.models import (
    DayCategory,
    DayRecord,
    DaySchedule,
    InvoiceLineItem,
    MissingCatalogEntry,
    ServiceCategory,
    TravelDay,
)

logger = logging.getLogger(__name__)

BUCKET_ORDER = (
    ServiceCategory.WEEKDAY,
    ServiceCategory.WEEKDAY_EVENING,
    ServiceCategory.WEEKDAY_SLEEPOVER,
    ServiceCategory.SATURDAY,
    ServiceCategory.SUNDAY,
    ServiceCategory.PUBLIC_HOLIDAY,
)

_WHOLE_DAY_BUCKETS = {
    DayCategory.SATURDAY: ServiceCategory.SATURDAY,
    DayCategory.SUNDAY: ServiceCategory.SUNDAY,
    DayCategory.PUBLIC_HOLIDAY: ServiceCategory.PUBLIC_HOLIDAY,
}


@dataclass
class Bucket:
    """Quantities accumulated for one service category, per contributing day."""
    category: ServiceCategory
    days: list[tuple[date, Decimal]] = field(default_factory=list)

    @property
    def unit(self) -> str:
        return "units" if self.category == ServiceCategory.WEEKDAY_SLEEPOVER else "hours"

    @property
    def quantity(self) -> Decimal:
        return sum((q for _, q in self.days), Decimal("0"))

    @property
    def dates(self) -> list[date]:
        return [d for d, _ in self.days]

    def add(self, day: date, quantity: Decimal) -> None:
        if quantity > 0:
            self.days.append((day, quantity))


@dataclass
class LineItemResult:
    line_items: list[InvoiceLineItem]
    warnings: list[MissingCatalogEntry] = field(default_factory=list)
    travel_breakdown: list[TravelDay] = field(default_factory=list)


def bucket_days(days: Sequence[tuple[DayRecord, DaySchedule]]) -> dict[ServiceCategory, Bucket]:
    """Distribute resolved schedules into the six billing buckets."""
    buckets = {category: Bucket(category) for category in BUCKET_ORDER}
    for record, schedule in days:
        if record.category == DayCategory.WEEKDAY:
            buckets[ServiceCategory.WEEKDAY].add(record.date, schedule.daytime_hours)
            buckets[ServiceCategory.WEEKDAY_EVENING].add(record.date, schedule.evening_hours)
            buckets[ServiceCategory.WEEKDAY_SLEEPOVER].add(record.date, schedule.sleepover_units)
        else:
            buckets[_WHOLE_DAY_BUCKETS[record.category]].add(record.date, schedule.total_hours)
    return buckets


def describe_quantity(day_count: int, quantity: Decimal, unit: str) -> str:
    """Human summary: '1 day x 8 hours', '5 day(s) x 8 hours' or '37.5 hours total'."""
    if day_count == 1:
        return f"1 day x {format_quantity(quantity)} {unit}"
    average = quantity / day_count
    if average == average.to_integral_value():
        return f"{day_count} day(s) x {format_quantity(average)} {unit}"
    return f"{format_quantity(quantity)} {unit} total"


def _travel_line_item(
    days: Sequence[tuple[DayRecord, DaySchedule]],
    default_km: Decimal,
    catalog: CatalogSnapshot,
    randomize: bool,
    seed: Optional[int],
    warnings: list[MissingCatalogEntry],
) -> tuple[Optional[InvoiceLineItem], list[TravelDay]]:
    if not days:
        return None, []

    exact = daily_distances(days, default_km)
    total_km = total_distance(exact)
    if total_km == 0:
        return None, []

    entry = catalog.resolve(ServiceCategory.TRAVEL)
    if entry is None:
        missing = MissingCatalogEntry(ServiceCategory.TRAVEL, total_km, tuple(d.date for d in exact))
        logger.warning(missing.message)
        warnings.append(missing)
        return None, []

    breakdown = apportion_travel(days, default_km, randomize=randomize, seed=seed)
    distinct = {d.km for d in exact}
    if len(exact) == 1:
        summary = describe_quantity(1, total_km, "km")
    elif len(distinct) == 1:
        summary = f"{len(exact)} day(s) x {format_quantity(exact[0].km)} km"
    else:
        summary = f"{format_quantity(total_km)} km total"

    item = InvoiceLineItem.priced(
        service_code=entry.code,
        description=f"{entry.description} - {summary}",
        quantity=total_km,
        unit_rate=entry.rate,
        category=ServiceCategory.TRAVEL.value,
        dates=format_breakdown(breakdown),
        daily_breakdown=tuple(breakdown),
    )
    return item, breakdown


def calculate_line_items(
    day_records: Sequence[DayRecord],
    default_schedule: DaySchedule,
    travel_km_per_day: Decimal,
    catalog: CatalogSnapshot,
    overrides: Optional[Mapping[DateLike, DaySchedule]] = None,
    randomize_travel: bool = False,
    seed: Optional[int] = None,
) -> LineItemResult:
    """Price every billable day against ``catalog``.

    Buckets without a catalog entry are omitted and reported as warnings.
    """
    days = billable_days(day_records, default_schedule, overrides)
    buckets = bucket_days(days)

    line_items: list[InvoiceLineItem] = []
    warnings: list[MissingCatalogEntry] = []

    for category in BUCKET_ORDER:
        bucket = buckets[category]
        if not bucket.days:
            continue

        entry = catalog.resolve(category)
        if entry is None:
            missing = MissingCatalogEntry(category, bucket.quantity, tuple(bucket.dates))
            logger.warning(missing.message)
            warnings.append(missing)
            continue

        summary = describe_quantity(len(bucket.days), bucket.quantity, bucket.unit)
        line_items.append(InvoiceLineItem.priced(
            service_code=entry.code,
            description=f"{entry.description} - {summary}",
            quantity=bucket.quantity,
            unit_rate=entry.rate,
            category=category.value,
            dates=format_dates_list(bucket.dates),
        ))

    travel_item, breakdown = _travel_line_item(
        days, Decimal(travel_km_per_day), catalog, randomize_travel, seed, warnings,
    )
    if travel_item is not None:
        line_items.append(travel_item)

    logger.debug(
        "Aggregated %d billable day(s) into %d line item(s), %d warning(s)",
        len(days), len(line_items), len(warnings),
    )
    return LineItemResult(line_items=line_items, warnings=warnings, travel_breakdown=breakdown)
