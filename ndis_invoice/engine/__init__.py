"""Categorization, aggregation, assembly and validation engines."""
from ndis_invoice.engine.day_categorizer import apply_exclusions, categorize_days, is_holiday, toggle_exclusion
from ndis_invoice.engine.schedule import billable_days, resolve_day_schedule
from ndis_invoice.engine.calculator import calculate_line_items
from ndis_invoice.engine.assembler import build_invoice, compute_invoice, generate_invoice
from ndis_invoice.engine.validator import validate_invoice

__all__ = [
    "apply_exclusions",
    "categorize_days",
    "is_holiday",
    "toggle_exclusion",
    "billable_days",
    "resolve_day_schedule",
    "calculate_line_items",
    "build_invoice",
    "compute_invoice",
    "generate_invoice",
    "validate_invoice",
]
