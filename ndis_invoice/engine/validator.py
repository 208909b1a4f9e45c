"""Invoice consistency validator.

Re-derives every line total, the subtotal, tax and grand total from the
invoice's own line items and reports discrepancies as findings. Nothing
is raised and nothing is mutated, so callers can gate export on
``ValidationResult.is_valid`` without interrupting the session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from ndis_invoice.config import get_settings
from ndis_invoice.models import Invoice, to_money

TOLERANCE = Decimal("0.01")


class FindingKind(Enum):
    LINE_ITEM_MISMATCH = "LineItemMismatch"
    TOTAL_MISMATCH = "TotalMismatch"
    RANGE_INVALID = "RangeInvalid"
    INCOMPLETE_CLIENT = "IncompleteClient"


@dataclass(frozen=True)
class ValidationFinding:
    kind: FindingKind
    message: str
    expected: Optional[Decimal] = None
    actual: Optional[Decimal] = None


@dataclass(frozen=True)
class ValidationSummary:
    total_hours_computed: Decimal
    total_km_computed: Decimal
    subtotal_computed: Decimal


@dataclass(frozen=True)
class ValidationResult:
    findings: list[ValidationFinding] = field(default_factory=list)
    summary: ValidationSummary = ValidationSummary(Decimal("0"), Decimal("0"), Decimal("0"))

    @property
    def is_valid(self) -> bool:
        return not self.findings


def _differs(expected: Decimal, actual: Decimal) -> bool:
    return abs(to_money(expected) - to_money(actual)) > TOLERANCE


def validate_invoice(invoice: Invoice, tax_rate: Optional[Decimal] = None) -> ValidationResult:
    """Check the invoice's arithmetic and structure; never raises."""
    if tax_rate is None:
        tax_rate = get_settings().tax_rate
    findings: list[ValidationFinding] = []
    total_hours = Decimal("0")
    total_km = Decimal("0")
    subtotal = Decimal("0")

    # --- Per line item ---
    for item in invoice.line_items:
        expected = to_money(item.quantity * item.unit_rate)
        if _differs(expected, item.total):
            findings.append(ValidationFinding(
                kind=FindingKind.LINE_ITEM_MISMATCH,
                message=(
                    f"Line item '{item.service_code}' total mismatch: "
                    f"{item.quantity} x ${item.unit_rate} = ${expected}, but got ${to_money(item.total)}"
                ),
                expected=expected,
                actual=item.total,
            ))

        subtotal += item.total
        if item.is_travel:
            total_km += item.quantity
        else:
            total_hours += item.quantity

    # --- Totals ---
    subtotal = to_money(subtotal)
    if _differs(subtotal, invoice.subtotal):
        findings.append(ValidationFinding(
            kind=FindingKind.TOTAL_MISMATCH,
            message=f"Subtotal mismatch: sum of line items = ${subtotal}, but invoice subtotal = ${invoice.subtotal}",
            expected=subtotal,
            actual=invoice.subtotal,
        ))

    expected_tax = to_money(invoice.subtotal * Decimal(tax_rate))
    if _differs(expected_tax, invoice.tax):
        findings.append(ValidationFinding(
            kind=FindingKind.TOTAL_MISMATCH,
            message=f"Tax mismatch: expected ${expected_tax} at rate {tax_rate}, got ${invoice.tax}",
            expected=expected_tax,
            actual=invoice.tax,
        ))

    expected_total = to_money(invoice.subtotal + invoice.tax)
    if _differs(expected_total, invoice.total):
        findings.append(ValidationFinding(
            kind=FindingKind.TOTAL_MISMATCH,
            message=(
                f"Total mismatch: ${invoice.subtotal} + ${invoice.tax} = ${expected_total}, "
                f"but got ${invoice.total}"
            ),
            expected=expected_total,
            actual=invoice.total,
        ))

    # --- Structure ---
    if invoice.start_date > invoice.end_date:
        findings.append(ValidationFinding(
            kind=FindingKind.RANGE_INVALID,
            message=(
                f"Date range invalid: start date ({invoice.start_date.isoformat()}) "
                f"is after end date ({invoice.end_date.isoformat()})"
            ),
        ))

    missing = invoice.client.missing_fields()
    if missing:
        findings.append(ValidationFinding(
            kind=FindingKind.INCOMPLETE_CLIENT,
            message=f"Client information incomplete: {', '.join(missing)} required",
        ))

    return ValidationResult(
        findings=findings,
        summary=ValidationSummary(
            total_hours_computed=total_hours,
            total_km_computed=total_km,
            subtotal_computed=subtotal,
        ),
    )


def format_findings(findings: Iterable[ValidationFinding]) -> str:
    """Findings grouped by kind, one bullet per message."""
    grouped: dict[FindingKind, list[ValidationFinding]] = {}
    for finding in findings:
        grouped.setdefault(finding.kind, []).append(finding)

    lines = []
    for kind, items in grouped.items():
        lines.append(f"{kind.value.upper()}:")
        lines.extend(f"  - {f.message}" for f in items)
    return "\n".join(lines)
