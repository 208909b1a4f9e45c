"""Holiday lookup and day categorization.

Every calendar day in the service period gets exactly one DayRecord.
Category precedence: public holiday > Sunday > Saturday > weekday.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, timedelta
from typing import Container, Iterable, Optional, Union

from ndis_invoice.config import DEFAULT_REGION
from ndis_invoice.dates import DateLike, as_date, iso_key
from ndis_invoice.holidays import holidays_for_region
from ndis_invoice.models import DayCategory, DayRecord, InvalidRange, ManualHoliday

logger = logging.getLogger(__name__)


def _manual_dates(manual_holidays: Iterable[Union[ManualHoliday, DateLike]]) -> dict[date, str]:
    result: dict[date, str] = {}
    for holiday in manual_holidays:
        if isinstance(holiday, ManualHoliday):
            result[as_date(holiday.date)] = holiday.name
        else:
            result[as_date(holiday)] = "Manual holiday"
    return result


def holiday_name(
    day: DateLike,
    manual_holidays: Iterable[Union[ManualHoliday, DateLike]] = (),
    region: str = DEFAULT_REGION,
) -> Optional[str]:
    """Name of the holiday on ``day``, or None. Static table wins over manual entries."""
    key = iso_key(day)
    entry = holidays_for_region(region).get(key)
    if entry is not None:
        return entry.name
    return _manual_dates(manual_holidays).get(as_date(day))


def is_holiday(
    day: DateLike,
    manual_holidays: Iterable[Union[ManualHoliday, DateLike]] = (),
    region: str = DEFAULT_REGION,
) -> bool:
    return holiday_name(day, manual_holidays, region) is not None


def day_category(day: date, holiday_dates: Container[date], static_keys: Container[str] = ()) -> DayCategory:
    if day in holiday_dates or day.isoformat() in static_keys:
        return DayCategory.PUBLIC_HOLIDAY
    weekday = day.weekday()  # Monday=0, Sunday=6
    if weekday == 6:
        return DayCategory.SUNDAY
    if weekday == 5:
        return DayCategory.SATURDAY
    return DayCategory.WEEKDAY


def categorize_days(
    start: DateLike,
    end: DateLike,
    manual_holidays: Iterable[Union[ManualHoliday, DateLike]] = (),
    region: str = DEFAULT_REGION,
) -> list[DayRecord]:
    """One record per day of the inclusive range, ascending, none excluded."""
    start_d = as_date(start)
    end_d = as_date(end)
    if start_d > end_d:
        raise InvalidRange(start_d, end_d)

    static = holidays_for_region(region)
    manual = set(_manual_dates(manual_holidays))

    records: list[DayRecord] = []
    current = start_d
    while current <= end_d:
        records.append(DayRecord(date=current, category=day_category(current, manual, static)))
        current += timedelta(days=1)

    logger.debug(
        "Categorized %d day(s) %s..%s (%s, %d manual holiday(s))",
        len(records), start_d, end_d, region, len(manual),
    )
    return records


def apply_exclusions(records: list[DayRecord], excluded_dates: Iterable[DateLike]) -> list[DayRecord]:
    """Mark records whose date is in ``excluded_dates``. Category is untouched."""
    excluded = {as_date(d) for d in excluded_dates}
    for record in records:
        if record.date in excluded:
            record.excluded = True
    return records


def toggle_exclusion(records: list[DayRecord], day: DateLike) -> Optional[DayRecord]:
    """Flip the exclusion flag of the record for ``day``; None if it is out of range."""
    target = as_date(day)
    for record in records:
        if record.date == target:
            record.toggle_excluded()
            return record
    return None


def count_days_by_category(records: Iterable[DayRecord]) -> dict[DayCategory, int]:
    """Non-excluded days per category."""
    counts = Counter(r.category for r in records if not r.excluded)
    return {category: counts.get(category, 0) for category in DayCategory}
