"""Display formatting shared by line-item descriptions, the CLI and exports."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from ndis_invoice.models import to_money


def format_date_display(day: date) -> str:
    """Short date, e.g. 03/01/2025."""
    return day.strftime("%d/%m/%Y")


def format_invoice_date(day: date) -> str:
    """Header date, e.g. 03 January 2025."""
    return day.strftime("%d %B %Y")


def format_dates_list(days: Iterable[date]) -> str:
    return ", ".join(format_date_display(d) for d in sorted(days))


def format_currency(amount: Decimal) -> str:
    """AUD amount with thousands separators, e.g. $2,702.40."""
    amount = to_money(Decimal(amount))
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_quantity(value: Decimal) -> str:
    """Drop trailing zeros: 8.00 -> 8, 27.50 -> 27.5."""
    value = Decimal(value)
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return format(value.normalize(), "f")


def generate_invoice_number(on: date, sequence: int = 1) -> str:
    """INV-YYYY-MMDD-NNNN. The per-day sequence counter is owned by the caller."""
    if sequence < 1:
        raise ValueError(f"Invoice sequence must be >= 1, got {sequence}")
    return f"INV-{on.strftime('%Y-%m%d')}-{sequence:04d}"


def client_slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9\s]", "", name.strip().lower())
    return re.sub(r"\s+", "-", slug)


def invoice_filename(
    invoice_number: str,
    extension: str = "pdf",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    client_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """e.g. INV-2025-0103-0001_01Jan25-07Jan25_jane-citizen_101530.pdf"""
    now = now or datetime.now()
    parts = [invoice_number]
    if start_date and end_date:
        parts.append(f"{start_date.strftime('%d%b%y')}-{end_date.strftime('%d%b%y')}")
    if client_name:
        slug = client_slug(client_name)
        if slug:
            parts.append(slug)
    parts.append(now.strftime("%H%M%S"))
    return f"{'_'.join(parts)}.{extension}"
