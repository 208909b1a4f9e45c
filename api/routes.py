"""API routes for the NDIS invoice engine."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from ndis_invoice.audit import generate_audit_dict
from ndis_invoice.catalog import CatalogStore, JsonFileCatalogStore, ServiceCatalog, entries_from_dicts, load_catalog
from ndis_invoice.config import get_settings
from ndis_invoice.engine import compute_invoice, validate_invoice
from ndis_invoice.models import (
    CatalogLoadError,
    CatalogValidationError,
    IncompleteClientInfo,
    InvalidRange,
)
from ndis_invoice.request import parse_invoice_request

from api.schemas import (
    CatalogEntryOut,
    CatalogErrorOut,
    CatalogValidationResponse,
    FindingOut,
    InvoiceRequestIn,
    InvoiceResponse,
    InvoiceSummary,
    LineItemOut,
    ValidationOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def get_catalog_store() -> Optional[CatalogStore]:
    path = get_settings().catalog_path
    return JsonFileCatalogStore(path) if path else None


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/catalog", response_model=list[CatalogEntryOut])
async def get_catalog(store: Optional[CatalogStore] = Depends(get_catalog_store)):
    """Current service catalog (local override or built-in default)."""
    try:
        snapshot = await load_catalog(store)
    except CatalogLoadError as e:
        logger.error("Catalog load failed: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    return snapshot.to_dicts()


@router.post("/catalog/validate", response_model=CatalogValidationResponse)
async def validate_catalog_body(items: list[Any] = Body(...)):
    """Check a catalog payload without saving it."""
    try:
        ServiceCatalog(entries_from_dicts(items))
    except CatalogValidationError as e:
        return CatalogValidationResponse(
            valid=False,
            errors=[CatalogErrorOut(entry_id=err.entry_id, field=err.field, message=err.message) for err in e.errors],
        )
    return CatalogValidationResponse(valid=True)


@router.post("/invoice", response_model=InvoiceResponse)
async def create_invoice(
    body: InvoiceRequestIn,
    store: Optional[CatalogStore] = Depends(get_catalog_store),
):
    """Compute an invoice and validate it.

    The catalog is loaded once for the request; the returned audit dict is
    what document renderers consume.
    """
    try:
        request = parse_invoice_request(body.model_dump(mode="json"))
    except ValueError as e:
        return InvoiceResponse(success=False, error_type="request_error", errors=[str(e)])

    try:
        catalog = await load_catalog(store)
        invoice = compute_invoice(request, catalog, randomize_travel=body.randomize_travel)
    except IncompleteClientInfo as e:
        return InvoiceResponse(success=False, error_type="client_error", errors=[str(e)])
    except InvalidRange as e:
        return InvoiceResponse(success=False, error_type="range_error", errors=[str(e)])
    except CatalogLoadError as e:
        logger.error("Catalog load failed: %s", e)
        return InvoiceResponse(success=False, error_type="catalog_error", errors=[str(e)])

    validation = validate_invoice(invoice)

    return InvoiceResponse(
        success=True,
        summary=InvoiceSummary(
            invoice_number=invoice.invoice_number,
            start_date=invoice.start_date.isoformat(),
            end_date=invoice.end_date.isoformat(),
            total_hours=float(invoice.total_hours),
            total_km=float(invoice.total_km),
            subtotal=float(invoice.subtotal),
            tax=float(invoice.tax),
            total=float(invoice.total),
        ),
        line_items=[
            LineItemOut(
                service_code=li.service_code,
                description=li.description,
                category=li.category,
                quantity=float(li.quantity),
                unit_rate=float(li.unit_rate),
                total=float(li.total),
                dates=li.dates,
            )
            for li in invoice.line_items
        ],
        validation=ValidationOut(
            is_valid=validation.is_valid,
            findings=[
                FindingOut(
                    kind=f.kind.value,
                    message=f.message,
                    expected=float(f.expected) if f.expected is not None else None,
                    actual=float(f.actual) if f.actual is not None else None,
                )
                for f in validation.findings
            ],
            total_hours_computed=float(validation.summary.total_hours_computed),
            total_km_computed=float(validation.summary.total_km_computed),
            subtotal_computed=float(validation.summary.subtotal_computed),
        ),
        warnings=[w.message for w in invoice.warnings],
        audit=generate_audit_dict(invoice, validation),
    )
