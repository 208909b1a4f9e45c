"""Invoice assembly.

``build_invoice`` turns categorized days plus schedules into a priced
Invoice. ``compute_invoice`` runs the whole pipeline from an
InvoiceRequest, and ``generate_invoice`` first loads the catalog once so
the rest of the pass works on a single snapshot.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ndis_invoice.catalog import CatalogSnapshot, CatalogStore, load_catalog
from ndis_invoice.config import get_settings
from ndis_invoice.dates import DateLike, as_date
from ndis_invoice.engine.calculator import calculate_line_items
from ndis_invoice.engine.day_categorizer import apply_exclusions, categorize_days
from ndis_invoice.engine.schedule import normalize_overrides
from ndis_invoice.models import (
    ClientInfo,
    DayRecord,
    DaySchedule,
    IncompleteClientInfo,
    Invoice,
    ManualHoliday,
    to_money,
)
from ndis_invoice.request import InvoiceRequest

logger = logging.getLogger(__name__)


def calculate_totals(line_totals: Sequence[Decimal], tax_rate: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """(subtotal, tax, total) for the given line totals."""
    subtotal = to_money(sum(line_totals, Decimal("0")))
    tax = to_money(subtotal * tax_rate)
    return subtotal, tax, subtotal + tax


def build_invoice(
    invoice_number: str,
    invoice_date: DateLike,
    start_date: DateLike,
    end_date: DateLike,
    client: ClientInfo,
    default_schedule: DaySchedule,
    travel_km_per_day: Decimal,
    day_records: list[DayRecord],
    overrides: Optional[Mapping[DateLike, DaySchedule]],
    catalog: CatalogSnapshot,
    *,
    tax_rate: Optional[Decimal] = None,
    randomize_travel: bool = False,
    seed: Optional[int] = None,
    manual_holidays: Sequence[ManualHoliday] = (),
) -> Invoice:
    """Price ``day_records`` and assemble the invoice.

    ``manual_holidays`` are the ones used to categorize ``day_records``;
    they are kept on the invoice so exports can name them.

    Raises IncompleteClientInfo when the client name or NDIS number is blank.
    """
    missing = client.missing_fields()
    if missing:
        raise IncompleteClientInfo(missing)

    if tax_rate is None:
        tax_rate = get_settings().tax_rate
    travel_km_per_day = Decimal(str(travel_km_per_day))
    if travel_km_per_day < 0:
        raise ValueError(f"Travel distance per day must be >= 0, got {travel_km_per_day}")

    normalized = normalize_overrides(overrides)
    result = calculate_line_items(
        day_records,
        default_schedule,
        travel_km_per_day,
        catalog,
        overrides=normalized,
        randomize_travel=randomize_travel,
        seed=seed,
    )
    subtotal, tax, total = calculate_totals([li.total for li in result.line_items], Decimal(tax_rate))

    invoice = Invoice(
        invoice_number=invoice_number,
        invoice_date=as_date(invoice_date),
        start_date=as_date(start_date),
        end_date=as_date(end_date),
        client=client,
        default_schedule=default_schedule,
        overrides=normalized,
        travel_km_per_day=travel_km_per_day,
        day_records=list(day_records),
        line_items=result.line_items,
        subtotal=subtotal,
        tax=tax,
        total=total,
        excluded_dates=[r.date for r in day_records if r.excluded],
        warnings=result.warnings,
        manual_holidays=list(manual_holidays),
    )
    logger.info(
        "Built invoice %s: %d line item(s), subtotal %s, total %s",
        invoice_number, len(invoice.line_items), subtotal, total,
    )
    return invoice


def compute_invoice(
    request: InvoiceRequest,
    catalog: CatalogSnapshot,
    *,
    tax_rate: Optional[Decimal] = None,
    region: Optional[str] = None,
    randomize_travel: Optional[bool] = None,
    seed: Optional[int] = None,
) -> Invoice:
    """Categorize the request's period, apply exclusions, and build the invoice."""
    settings = get_settings()
    records = categorize_days(
        request.start_date,
        request.end_date,
        request.manual_holidays,
        region=region or settings.region,
    )
    apply_exclusions(records, request.excluded_dates)
    return build_invoice(
        request.invoice_number,
        request.invoice_date,
        request.start_date,
        request.end_date,
        request.client,
        request.default_schedule,
        request.travel_km_per_day,
        records,
        request.overrides,
        catalog,
        tax_rate=tax_rate,
        randomize_travel=settings.randomize_travel if randomize_travel is None else randomize_travel,
        seed=seed,
        manual_holidays=request.manual_holidays,
    )


async def generate_invoice(
    request: InvoiceRequest,
    store: Optional[CatalogStore] = None,
    **kwargs,
) -> Invoice:
    """Load the catalog once, then compute the invoice from that snapshot."""
    catalog = await load_catalog(store)
    return compute_invoice(request, catalog, **kwargs)
