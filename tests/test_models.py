"""Tests for canonical data models."""

import pytest
from decimal import Decimal
from datetime import date

from ndis_invoice.models import (
    CatalogFieldError,
    CatalogValidationError,
    ClientInfo,
    DayCategory,
    DayRecord,
    DaySchedule,
    InvoiceLineItem,
    to_money,
)


class TestDaySchedule:
    def test_total_hours(self):
        s = DaySchedule(daytime_hours=Decimal("6"), evening_hours=Decimal("2"), sleepover_units=Decimal("1"))
        assert s.total_hours == Decimal("9")
        assert not s.is_empty

    def test_defaults_are_empty(self):
        assert DaySchedule().is_empty
        assert DaySchedule().travel_km_override is None

    def test_numbers_coerced_to_decimal(self):
        s = DaySchedule(daytime_hours=8, evening_hours=1.5, travel_km_override=27.5)
        assert s.daytime_hours == Decimal("8")
        assert s.evening_hours == Decimal("1.5")
        assert s.travel_km_override == Decimal("27.5")

    def test_negative_hours_raise(self):
        with pytest.raises(ValueError, match="non-negative"):
            DaySchedule(daytime_hours=Decimal("-1"))

    def test_negative_travel_override_raises(self):
        with pytest.raises(ValueError, match="travel_km_override"):
            DaySchedule(daytime_hours=Decimal("8"), travel_km_override=Decimal("-3"))


class TestDayRecord:
    def test_toggle_twice_restores(self):
        record = DayRecord(date=date(2025, 2, 5), category=DayCategory.WEEKDAY)
        record.toggle_excluded()
        assert record.excluded is True
        record.toggle_excluded()
        assert record.excluded is False
        assert record.category == DayCategory.WEEKDAY

    def test_category_is_fixed(self):
        record = DayRecord(date=date(2025, 2, 5), category=DayCategory.WEEKDAY)
        with pytest.raises(AttributeError, match="category"):
            record.category = DayCategory.PUBLIC_HOLIDAY
        assert record.category == DayCategory.WEEKDAY

    def test_excluded_can_be_set(self):
        record = DayRecord(date=date(2025, 2, 5), category=DayCategory.WEEKDAY)
        record.excluded = True
        assert record.excluded is True


class TestInvoiceLineItem:
    def test_priced_rounds_to_cents(self):
        item = InvoiceLineItem.priced(
            service_code="04_104_0125_6_1",
            description="Weekday",
            quantity=Decimal("7.5"),
            unit_rate=Decimal("67.56"),
            category="weekday",
        )
        # 7.5 * 67.56 = 506.70
        assert item.total == Decimal("506.70")
        assert not item.is_travel

    def test_travel_flag(self):
        item = InvoiceLineItem.priced("04_799_0125_6_1", "Travel", Decimal("10"), Decimal("1"), "travel")
        assert item.is_travel

    def test_to_money_half_up(self):
        assert to_money(Decimal("2.345")) == Decimal("2.35")
        assert to_money(Decimal("2.344")) == Decimal("2.34")


class TestClientInfo:
    def test_complete(self):
        assert ClientInfo(name="Jane Citizen", ndis_number="430000001").missing_fields() == []

    def test_blank_fields_reported(self):
        assert ClientInfo(name="  ", ndis_number="").missing_fields() == ["name", "ndis_number"]


class TestCatalogValidationError:
    def test_error_message(self):
        errors = [
            CatalogFieldError("a", "code", "Code is required"),
            CatalogFieldError("b", "rate", "Rate must be >= 0, got -1"),
        ]
        e = CatalogValidationError(errors)
        assert "2 error(s)" in str(e)
        assert "a.code: Code is required" in str(e)
        assert e.errors == errors
