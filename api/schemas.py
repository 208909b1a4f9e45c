"""Pydantic request/response models for the Invoice API."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, Field


class ScheduleIn(BaseModel):
    daytime_hours: float = Field(0, ge=0)
    evening_hours: float = Field(0, ge=0)
    sleepover_units: float = Field(0, ge=0)
    travel_km_override: float | None = Field(None, ge=0)


class ClientIn(BaseModel):
    name: str = ""
    ndis_number: str = ""
    address: str | None = None
    plan_manager: str | None = None
    plan_manager_email: str | None = None


class ManualHolidayIn(BaseModel):
    date: datetime.date
    name: str = "Manual holiday"


class InvoiceRequestIn(BaseModel):
    invoice_number: str | None = None
    invoice_date: datetime.date | None = None
    start_date: datetime.date
    end_date: datetime.date
    client: ClientIn
    default_schedule: ScheduleIn = Field(default_factory=lambda: ScheduleIn(daytime_hours=8))
    travel_km_per_day: float | None = Field(None, ge=0)
    overrides: dict[str, ScheduleIn] = Field(default_factory=dict)
    manual_holidays: list[ManualHolidayIn] = Field(default_factory=list)
    excluded_dates: list[datetime.date] = Field(default_factory=list)
    randomize_travel: bool | None = None


class LineItemOut(BaseModel):
    service_code: str
    description: str
    category: str
    quantity: float
    unit_rate: float
    total: float
    dates: str


class InvoiceSummary(BaseModel):
    invoice_number: str
    start_date: str
    end_date: str
    total_hours: float
    total_km: float
    subtotal: float
    tax: float
    total: float


class FindingOut(BaseModel):
    kind: str
    message: str
    expected: float | None = None
    actual: float | None = None


class ValidationOut(BaseModel):
    is_valid: bool
    findings: list[FindingOut]
    total_hours_computed: float
    total_km_computed: float
    subtotal_computed: float


class InvoiceResponse(BaseModel):
    success: bool
    summary: InvoiceSummary | None = None
    line_items: list[LineItemOut] | None = None
    validation: ValidationOut | None = None
    warnings: list[str] | None = None
    audit: dict | None = None
    error_type: str | None = None
    errors: list[str] | None = None


class CatalogEntryOut(BaseModel):
    id: str
    category: str
    code: str
    description: str
    rate: float
    active: bool


class CatalogErrorOut(BaseModel):
    entry_id: str
    field: str
    message: str


class CatalogValidationResponse(BaseModel):
    valid: bool
    errors: list[CatalogErrorOut] = Field(default_factory=list)
