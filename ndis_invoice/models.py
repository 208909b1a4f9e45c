"""Canonical data model for the NDIS invoice engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Round a currency amount to cents."""
    return value.quantize(CENT, ROUND_HALF_UP)


class DayCategory(Enum):
    WEEKDAY = "weekday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    PUBLIC_HOLIDAY = "publicHoliday"


class ServiceCategory(Enum):
    """Rate-card categories. Only weekdays split into daytime/evening/sleepover."""
    WEEKDAY = "weekday"
    WEEKDAY_EVENING = "weekdayEvening"
    WEEKDAY_SLEEPOVER = "weekdaySleepover"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    PUBLIC_HOLIDAY = "publicHoliday"
    TRAVEL = "travel"


@dataclass(frozen=True)
class HolidayEntry:
    iso_date: str
    name: str
    region: str


@dataclass(frozen=True)
class ManualHoliday:
    """User-supplied holiday, valid for the current session only."""
    date: date
    name: str = "Manual holiday"


@dataclass
class DayRecord:
    """One calendar day of the service period.

    ``category`` is fixed at creation; ``excluded`` is the only field
    callers change afterwards.
    """
    date: date
    category: DayCategory
    excluded: bool = False

    def __setattr__(self, name, value):
        if name == "category" and "category" in self.__dict__:
            raise AttributeError("DayRecord.category cannot change after categorization")
        super().__setattr__(name, value)

    def toggle_excluded(self) -> None:
        self.excluded = not self.excluded


@dataclass(frozen=True)
class DaySchedule:
    """Hours worked on a single day, plus an optional travel distance override."""
    daytime_hours: Decimal = Decimal("0")
    evening_hours: Decimal = Decimal("0")
    sleepover_units: Decimal = Decimal("0")
    travel_km_override: Optional[Decimal] = None

    def __post_init__(self) -> None:
        for name in ("daytime_hours", "evening_hours", "sleepover_units", "travel_km_override"):
            val = getattr(self, name)
            if val is None:
                continue
            if not isinstance(val, Decimal):
                val = Decimal(str(val))
                object.__setattr__(self, name, val)
            if not val.is_finite() or val < 0:
                raise ValueError(f"Schedule field '{name}' must be a non-negative number, got {val}")

    @property
    def total_hours(self) -> Decimal:
        return self.daytime_hours + self.evening_hours + self.sleepover_units

    @property
    def is_empty(self) -> bool:
        return self.total_hours == 0


@dataclass(frozen=True)
class ClientInfo:
    name: str
    ndis_number: str
    address: Optional[str] = None
    plan_manager: Optional[str] = None
    plan_manager_email: Optional[str] = None

    def missing_fields(self) -> list[str]:
        missing = []
        if not (self.name or "").strip():
            missing.append("name")
        if not (self.ndis_number or "").strip():
            missing.append("ndis_number")
        return missing


@dataclass(frozen=True)
class ServiceCatalogEntry:
    """One rate-card row."""
    id: str
    category: ServiceCategory
    code: str
    description: str
    rate: Decimal
    active: bool = True


@dataclass(frozen=True)
class TravelDay:
    date: date
    km: Decimal


@dataclass(frozen=True)
class InvoiceLineItem:
    """One priced row of an invoice."""
    service_code: str
    description: str
    quantity: Decimal
    unit_rate: Decimal
    total: Decimal
    category: str
    dates: str = ""
    daily_breakdown: tuple[TravelDay, ...] = ()

    @classmethod
    def priced(cls, service_code: str, description: str, quantity: Decimal,
               unit_rate: Decimal, category: str, **kwargs) -> "InvoiceLineItem":
        return cls(
            service_code=service_code,
            description=description,
            quantity=quantity,
            unit_rate=unit_rate,
            total=to_money(quantity * unit_rate),
            category=category,
            **kwargs,
        )

    @property
    def is_travel(self) -> bool:
        return self.category == ServiceCategory.TRAVEL.value


@dataclass(frozen=True)
class MissingCatalogEntry:
    """Non-fatal: a bucket had billable quantity but no catalog entry to price it."""
    category: ServiceCategory
    quantity: Decimal
    dates: tuple[date, ...]

    @property
    def message(self) -> str:
        return (
            f"No catalog entry for '{self.category.value}': "
            f"{self.quantity} unbilled across {len(self.dates)} day(s)"
        )


@dataclass
class Invoice:
    """Complete invoice produced by one calculation pass."""
    invoice_number: str
    invoice_date: date
    start_date: date
    end_date: date
    client: ClientInfo
    default_schedule: DaySchedule
    overrides: dict[str, DaySchedule]
    travel_km_per_day: Decimal
    day_records: list[DayRecord]
    line_items: list[InvoiceLineItem]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    excluded_dates: list[date] = field(default_factory=list)
    warnings: list[MissingCatalogEntry] = field(default_factory=list)
    manual_holidays: list[ManualHoliday] = field(default_factory=list)

    @property
    def total_hours(self) -> Decimal:
        return sum((li.quantity for li in self.line_items if not li.is_travel), Decimal("0"))

    @property
    def total_km(self) -> Decimal:
        return sum((li.quantity for li in self.line_items if li.is_travel), Decimal("0"))


class InvalidRange(ValueError):
    """Raised when the service period ends before it starts."""
    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(f"End date {end.isoformat()} precedes start date {start.isoformat()}")


class IncompleteClientInfo(ValueError):
    """Raised when required client fields are blank."""
    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Client information incomplete: missing {', '.join(fields)}")


@dataclass(frozen=True)
class CatalogFieldError:
    entry_id: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.entry_id}.{self.field}: {self.message}"


class CatalogValidationError(Exception):
    """Raised when a catalog mutation would leave the catalog invalid."""
    def __init__(self, errors: list[CatalogFieldError]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))


class CatalogLoadError(Exception):
    """Raised when the service catalog cannot be read or parsed."""
