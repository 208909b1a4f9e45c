"""Tests for invoice assembly."""

import asyncio
import pytest
from dataclasses import replace
from decimal import Decimal
from datetime import date

from ndis_invoice.catalog import JsonFileCatalogStore, ServiceCatalog, default_catalog, save_catalog
from ndis_invoice.engine.assembler import build_invoice, calculate_totals, compute_invoice, generate_invoice
from ndis_invoice.engine.day_categorizer import categorize_days
from ndis_invoice.engine.validator import validate_invoice
from ndis_invoice.models import ClientInfo, DaySchedule, IncompleteClientInfo, InvalidRange
from ndis_invoice.request import parse_invoice_request


def _make_client(name="Jane Citizen", ndis_number="430000001"):
    return ClientInfo(name=name, ndis_number=ndis_number, plan_manager="Plan Partners")


def _make_request(**overrides):
    data = {
        "invoice_number": "INV-2025-0212-0001",
        "invoice_date": "2025-02-12",
        "start_date": "2025-02-05",
        "end_date": "2025-02-11",
        "client": {"name": "Jane Citizen", "ndis_number": "430000001"},
        "default_schedule": {"daytime_hours": 8},
        "travel_km_per_day": 27.5,
    }
    data.update(overrides)
    return parse_invoice_request(data)


def _build(records=None, client=None, travel="27.5", overrides=None, **kwargs):
    records = records if records is not None else categorize_days(date(2025, 2, 5), date(2025, 2, 11))
    return build_invoice(
        "INV-2025-0212-0001",
        date(2025, 2, 12),
        date(2025, 2, 5),
        date(2025, 2, 11),
        client or _make_client(),
        DaySchedule(daytime_hours=Decimal("8")),
        Decimal(travel),
        records,
        overrides,
        default_catalog(),
        **kwargs,
    )


class TestCalculateTotals:
    def test_no_tax(self):
        assert calculate_totals([Decimal("10.00"), Decimal("5.55")], Decimal("0")) == (
            Decimal("15.55"), Decimal("0.00"), Decimal("15.55"),
        )

    def test_with_tax(self):
        subtotal, tax, total = calculate_totals([Decimal("100.05")], Decimal("0.1"))
        assert tax == Decimal("10.01")
        assert total == Decimal("110.06")

    def test_empty(self):
        assert calculate_totals([], Decimal("0")) == (Decimal("0.00"), Decimal("0.00"), Decimal("0.00"))


class TestBuildInvoice:
    def test_standard_week_totals(self):
        invoice = _build(tax_rate=Decimal("0"))
        # 2702.40 + 760.56 + 980.72 + 192.50
        assert invoice.subtotal == Decimal("4636.18")
        assert invoice.tax == Decimal("0.00")
        assert invoice.total == Decimal("4636.18")
        assert invoice.total_hours == Decimal("56")
        assert invoice.total_km == Decimal("192.5")

    def test_subtotal_is_sum_of_line_totals(self):
        invoice = _build(tax_rate=Decimal("0.1"))
        assert invoice.subtotal == sum(li.total for li in invoice.line_items)
        assert invoice.total == invoice.subtotal + invoice.tax

    def test_tax_rate(self):
        invoice = _build(tax_rate=Decimal("0.1"))
        assert invoice.tax == Decimal("463.62")
        assert invoice.total == Decimal("5099.80")

    def test_incomplete_client(self):
        with pytest.raises(IncompleteClientInfo, match="ndis_number"):
            _build(client=_make_client(ndis_number=""))

    def test_negative_travel(self):
        with pytest.raises(ValueError, match="Travel distance"):
            _build(travel="-1")

    def test_excluded_dates_recorded(self):
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 11))
        records[3].toggle_excluded()
        invoice = _build(records=records)
        assert invoice.excluded_dates == [date(2025, 2, 8)]
        assert "saturday" not in [li.category for li in invoice.line_items]

    def test_overrides_keys_normalized(self):
        invoice = _build(overrides={date(2025, 2, 6): DaySchedule(daytime_hours=Decimal("4"))})
        assert list(invoice.overrides) == ["2025-02-06"]

    def test_empty_invoice_when_all_excluded(self):
        records = categorize_days(date(2025, 2, 5), date(2025, 2, 11))
        for r in records:
            r.toggle_excluded()
        invoice = _build(records=records)
        assert invoice.line_items == []
        assert invoice.total == Decimal("0.00")

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_built_invoice_always_validates(self, seed):
        invoice = _build(tax_rate=Decimal("0.1"), randomize_travel=True, seed=seed)
        assert validate_invoice(invoice, tax_rate=Decimal("0.1")).is_valid


class TestComputeInvoice:
    def test_from_request(self):
        invoice = compute_invoice(_make_request(), default_catalog(), tax_rate=Decimal("0"))
        assert invoice.invoice_number == "INV-2025-0212-0001"
        assert len(invoice.day_records) == 7
        assert invoice.total == Decimal("4636.18")

    def test_new_year_week_bills_holiday(self):
        request = _make_request(start_date="2025-01-01", end_date="2025-01-07")
        invoice = compute_invoice(request, default_catalog(), tax_rate=Decimal("0"))
        categories = {li.category: li for li in invoice.line_items}
        assert categories["weekday"].quantity == Decimal("32")
        assert categories["publicHoliday"].quantity == Decimal("8")

    def test_exclusions_applied(self):
        request = _make_request(excluded_dates=["2025-02-09"])
        invoice = compute_invoice(request, default_catalog(), tax_rate=Decimal("0"))
        assert invoice.excluded_dates == [date(2025, 2, 9)]
        assert invoice.total_km == Decimal("165")

    def test_invalid_range(self):
        request = _make_request(start_date="2025-02-11", end_date="2025-02-05")
        with pytest.raises(InvalidRange):
            compute_invoice(request, default_catalog())


class TestGenerateInvoice:
    def test_uses_default_catalog(self):
        invoice = asyncio.run(generate_invoice(_make_request(), tax_rate=Decimal("0")))
        assert invoice.subtotal == Decimal("4636.18")

    def test_uses_saved_catalog(self, tmp_path):
        store = JsonFileCatalogStore(tmp_path / "catalog.json")
        catalog = ServiceCatalog(default_catalog().entries)
        entry = next(e for e in catalog.entries if e.category.value == "weekday")
        catalog.update(replace(entry, rate=Decimal("70.00")))
        asyncio.run(save_catalog(store, catalog))

        invoice = asyncio.run(generate_invoice(_make_request(), store, tax_rate=Decimal("0")))
        weekday = next(li for li in invoice.line_items if li.category == "weekday")
        assert weekday.total == Decimal("2800.00")
