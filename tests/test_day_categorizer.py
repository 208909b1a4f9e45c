"""Tests for holiday lookup and day categorization."""

import pytest
from datetime import date, datetime, timedelta

from ndis_invoice.engine.day_categorizer import (
    apply_exclusions,
    categorize_days,
    count_days_by_category,
    holiday_name,
    is_holiday,
    toggle_exclusion,
)
from ndis_invoice.models import DayCategory, InvalidRange, ManualHoliday


class TestIsHoliday:
    def test_static_holiday(self):
        assert is_holiday(date(2025, 1, 1))
        assert holiday_name(date(2025, 4, 25)) == "ANZAC Day"

    def test_ordinary_day(self):
        assert not is_holiday(date(2025, 2, 5))

    def test_datetime_compares_by_calendar_date(self):
        assert is_holiday(datetime(2025, 12, 25, 23, 59))

    def test_manual_holiday(self):
        manual = [ManualHoliday(date(2025, 2, 6), "Office closure")]
        assert is_holiday(date(2025, 2, 6), manual)
        assert holiday_name(date(2025, 2, 6), manual) == "Office closure"
        assert not is_holiday(date(2025, 2, 7), manual)

    def test_manual_holiday_given_as_datetime(self):
        assert is_holiday(date(2025, 2, 6), [datetime(2025, 2, 6, 9, 30)])

    def test_unknown_region_has_no_static_holidays(self):
        assert not is_holiday(date(2025, 1, 1), region="NSW")

    def test_year_without_data_is_not_an_error(self):
        assert not is_holiday(date(2031, 12, 25))


class TestCategorizeDays:
    def test_one_record_per_day_ascending(self):
        start, end = date(2025, 2, 1), date(2025, 3, 15)
        records = categorize_days(start, end)
        assert len(records) == (end - start).days + 1
        dates = [r.date for r in records]
        assert dates == sorted(set(dates))
        assert dates[0] == start and dates[-1] == end

    def test_single_day_range(self):
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 5))
        assert len(records) == 1

    def test_invalid_range(self):
        with pytest.raises(InvalidRange, match="precedes"):
            categorize_days(date(2025, 2, 11), date(2025, 2, 5))

    def test_week_categories(self):
        # 2025-02-05 is a Wednesday
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 11))
        categories = [r.category for r in records]
        assert categories == [
            DayCategory.WEEKDAY,   # Wed
            DayCategory.WEEKDAY,   # Thu
            DayCategory.WEEKDAY,   # Fri
            DayCategory.SATURDAY,
            DayCategory.SUNDAY,
            DayCategory.WEEKDAY,   # Mon
            DayCategory.WEEKDAY,   # Tue
        ]
        assert all(r.excluded is False for r in records)

    def test_holiday_overrides_weekend(self):
        # Easter Sunday and the Saturday before it
        records = categorize_days(date(2025, 4, 19), date(2025, 4, 20))
        assert [r.category for r in records] == [DayCategory.PUBLIC_HOLIDAY, DayCategory.PUBLIC_HOLIDAY]

    def test_new_years_day_is_holiday(self):
        # 2025-01-01 is a Wednesday
        records = categorize_days(date(2025, 1, 1), date(2025, 1, 7))
        assert records[0].category == DayCategory.PUBLIC_HOLIDAY
        counts = count_days_by_category(records)
        assert counts[DayCategory.WEEKDAY] == 4
        assert counts[DayCategory.SATURDAY] == 1
        assert counts[DayCategory.SUNDAY] == 1
        assert counts[DayCategory.PUBLIC_HOLIDAY] == 1

    def test_manual_holiday_reclassifies_weekday(self):
        records = categorize_days(
            date(2025, 2, 5), date(2025, 2, 7),
            manual_holidays=[ManualHoliday(date(2025, 2, 6))],
        )
        assert [r.category for r in records] == [
            DayCategory.WEEKDAY, DayCategory.PUBLIC_HOLIDAY, DayCategory.WEEKDAY,
        ]

    def test_every_static_holiday_categorized_as_holiday(self):
        records = categorize_days(date(2026, 1, 1), date(2026, 12, 31))
        holidays = [r for r in records if is_holiday(r.date)]
        assert holidays
        assert all(r.category == DayCategory.PUBLIC_HOLIDAY for r in holidays)


class TestExclusions:
    def test_apply_exclusions(self):
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 11))
        apply_exclusions(records, [date(2025, 2, 8), "2025-02-10"])
        excluded = [r.date for r in records if r.excluded]
        assert excluded == [date(2025, 2, 8), date(2025, 2, 10)]

    def test_toggle_twice_is_identity(self):
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 11))
        before = [(r.date, r.category, r.excluded) for r in records]
        for day in (date(2025, 2, 9), date(2025, 2, 9)):
            toggle_exclusion(records, day)
        assert [(r.date, r.category, r.excluded) for r in records] == before

    def test_toggle_keeps_category(self):
        records = categorize_days(date(2025, 2, 8), date(2025, 2, 9))
        record = toggle_exclusion(records, date(2025, 2, 8))
        assert record.excluded is True
        assert record.category == DayCategory.SATURDAY

    def test_toggle_out_of_range(self):
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 6))
        assert toggle_exclusion(records, date(2025, 2, 5) + timedelta(days=30)) is None

    def test_counts_skip_excluded(self):
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 11))
        apply_exclusions(records, [date(2025, 2, 5), date(2025, 2, 9)])
        counts = count_days_by_category(records)
        assert counts[DayCategory.WEEKDAY] == 4
        assert counts[DayCategory.SUNDAY] == 0
