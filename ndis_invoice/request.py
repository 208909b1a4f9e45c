"""Invoice request: the engine's input, parsed from plain JSON-style dicts.

Used by the CLI (request file) and the API (validated body, dumped to a dict).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ndis_invoice.config import get_settings
from ndis_invoice.dates import as_date, iso_key
from ndis_invoice.formatting import generate_invoice_number
from ndis_invoice.models import ClientInfo, DaySchedule, ManualHoliday


@dataclass
class InvoiceRequest:
    invoice_number: str
    invoice_date: date
    start_date: date
    end_date: date
    client: ClientInfo
    default_schedule: DaySchedule
    travel_km_per_day: Decimal
    overrides: dict[str, DaySchedule] = field(default_factory=dict)
    manual_holidays: list[ManualHoliday] = field(default_factory=list)
    excluded_dates: list[date] = field(default_factory=list)


def _decimal(value: Any, name: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    return result


def _date(value: Any, name: str) -> date:
    try:
        return as_date(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}") from None


def parse_schedule(data: Optional[dict], name: str = "schedule") -> DaySchedule:
    data = data or {}
    travel = data.get("travel_km_override")
    return DaySchedule(
        daytime_hours=_decimal(data.get("daytime_hours"), f"{name}.daytime_hours"),
        evening_hours=_decimal(data.get("evening_hours"), f"{name}.evening_hours"),
        sleepover_units=_decimal(data.get("sleepover_units"), f"{name}.sleepover_units"),
        travel_km_override=None if travel is None else _decimal(travel, f"{name}.travel_km_override"),
    )


def parse_client(data: Optional[dict]) -> ClientInfo:
    data = data or {}
    return ClientInfo(
        name=str(data.get("name") or "").strip(),
        ndis_number=str(data.get("ndis_number") or "").strip(),
        address=data.get("address") or None,
        plan_manager=data.get("plan_manager") or None,
        plan_manager_email=data.get("plan_manager_email") or None,
    )


def parse_invoice_request(data: dict[str, Any]) -> InvoiceRequest:
    """Build an InvoiceRequest; raises ValueError naming the offending field."""
    invoice_date = _date(data.get("invoice_date") or date.today(), "invoice_date")

    overrides: dict[str, DaySchedule] = {}
    for key, schedule in (data.get("overrides") or {}).items():
        canonical = iso_key(_date(key, "overrides key"))
        if canonical in overrides:
            raise ValueError(f"Duplicate schedule override for {canonical}")
        overrides[canonical] = parse_schedule(schedule, f"overrides[{canonical}]")

    manual_holidays = []
    for item in data.get("manual_holidays") or []:
        if isinstance(item, dict):
            manual_holidays.append(ManualHoliday(
                date=_date(item.get("date"), "manual_holidays.date"),
                name=item.get("name") or "Manual holiday",
            ))
        else:
            manual_holidays.append(ManualHoliday(date=_date(item, "manual_holidays")))

    travel = data.get("travel_km_per_day")
    travel_km = _decimal(travel, "travel_km_per_day") if travel is not None else None
    if travel_km is None:
        travel_km = get_settings().default_travel_km
    if travel_km < 0:
        raise ValueError(f"travel_km_per_day must be >= 0, got {travel_km}")

    return InvoiceRequest(
        invoice_number=str(data.get("invoice_number") or generate_invoice_number(invoice_date)),
        invoice_date=invoice_date,
        start_date=_date(data.get("start_date"), "start_date"),
        end_date=_date(data.get("end_date"), "end_date"),
        client=parse_client(data.get("client")),
        default_schedule=parse_schedule(data.get("default_schedule"), "default_schedule"),
        travel_km_per_day=travel_km,
        overrides=overrides,
        manual_holidays=manual_holidays,
        excluded_dates=[_date(d, "excluded_dates") for d in data.get("excluded_dates") or []],
    )
