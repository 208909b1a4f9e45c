"""Audit output.

Serializes a computed invoice (and optionally its validation result) to a
JSON-ready dict. Renderers read these values verbatim and never recompute
totals.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Optional

from ndis_invoice.config import get_settings
from ndis_invoice.engine.day_categorizer import holiday_name
from ndis_invoice.engine.validator import ValidationResult
from ndis_invoice.models import DaySchedule, Invoice


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


def _schedule_dict(schedule: DaySchedule) -> dict:
    data = {
        "daytime_hours": float(schedule.daytime_hours),
        "evening_hours": float(schedule.evening_hours),
        "sleepover_units": float(schedule.sleepover_units),
    }
    if schedule.travel_km_override is not None:
        data["travel_km_override"] = float(schedule.travel_km_override)
    return data


def validation_dict(validation: ValidationResult) -> dict:
    return {
        "is_valid": validation.is_valid,
        "findings": [
            {
                "kind": f.kind.value,
                "message": f.message,
                "expected": float(f.expected) if f.expected is not None else None,
                "actual": float(f.actual) if f.actual is not None else None,
            }
            for f in validation.findings
        ],
        "summary": {
            "total_hours_computed": float(validation.summary.total_hours_computed),
            "total_km_computed": float(validation.summary.total_km_computed),
            "subtotal_computed": float(validation.summary.subtotal_computed),
        },
    }


def generate_audit_dict(invoice: Invoice, validation: Optional[ValidationResult] = None) -> dict:
    """Build audit dictionary from a computed invoice (no file I/O)."""
    region = get_settings().region
    audit = {
        "invoice_number": invoice.invoice_number,
        "invoice_date": invoice.invoice_date.isoformat(),
        "start_date": invoice.start_date.isoformat(),
        "end_date": invoice.end_date.isoformat(),
        "client": {
            "name": invoice.client.name,
            "ndis_number": invoice.client.ndis_number,
            "address": invoice.client.address,
            "plan_manager": invoice.client.plan_manager,
            "plan_manager_email": invoice.client.plan_manager_email,
        },
        "default_schedule": _schedule_dict(invoice.default_schedule),
        "overrides": {key: _schedule_dict(s) for key, s in sorted(invoice.overrides.items())},
        "travel_km_per_day": float(invoice.travel_km_per_day),
        "days": [
            {
                "date": r.date.isoformat(),
                "category": r.category.value,
                "excluded": r.excluded,
                "holiday": holiday_name(r.date, invoice.manual_holidays, region=region),
            }
            for r in invoice.day_records
        ],
        "excluded_dates": [d.isoformat() for d in invoice.excluded_dates],
        "manual_holidays": [
            {"date": h.date.isoformat(), "name": h.name} for h in invoice.manual_holidays
        ],
        "line_items": [
            {
                "service_code": li.service_code,
                "description": li.description,
                "category": li.category,
                "quantity": float(li.quantity),
                "unit_rate": float(li.unit_rate),
                "total": float(li.total),
                "dates": li.dates,
                "daily_breakdown": [
                    {"date": d.date.isoformat(), "km": float(d.km)} for d in li.daily_breakdown
                ],
            }
            for li in invoice.line_items
        ],
        "warnings": [w.message for w in invoice.warnings],
        "summary": {
            "total_hours": float(invoice.total_hours),
            "total_km": float(invoice.total_km),
            "subtotal": float(invoice.subtotal),
            "tax": float(invoice.tax),
            "total": float(invoice.total),
        },
    }
    if validation is not None:
        audit["validation"] = validation_dict(validation)
    return audit


def generate_audit(
    invoice: Invoice,
    output_path: str | Path,
    validation: Optional[ValidationResult] = None,
) -> Path:
    """Generate audit JSON file from a computed invoice."""
    output_path = Path(output_path)
    audit = generate_audit_dict(invoice, validation)
    output_path.write_text(json.dumps(audit, indent=2, cls=DecimalEncoder), encoding='utf-8')
    return output_path
