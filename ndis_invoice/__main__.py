"""CLI entry point.

Usage:
    python -m ndis_invoice generate request.json --audit-out Audit.json
    python -m ndis_invoice catalog-export --out services.json
    python -m ndis_invoice catalog-import services.json

Request file shape:
    {
      "invoice_number": "INV-2025-0212-0001",      (optional)
      "invoice_date": "2025-02-12",
      "start_date": "2025-02-05", "end_date": "2025-02-11",
      "client": {"name": "...", "ndis_number": "...", "address": "..."},
      "default_schedule": {"daytime_hours": 8, "evening_hours": 0, "sleepover_units": 0},
      "travel_km_per_day": 27.5,
      "overrides": {"2025-02-06": {"daytime_hours": 4, "travel_km_override": 10}},
      "manual_holidays": [{"date": "2025-02-07", "name": "..."}],
      "excluded_dates": ["2025-02-10"]
    }
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from ndis_invoice.models import (
    CatalogLoadError,
    CatalogValidationError,
    IncompleteClientInfo,
    InvalidRange,
)

app = typer.Typer(help="Compute and validate NDIS service invoices.", add_completion=False)


def _catalog_store(catalog: Optional[str]):
    from ndis_invoice.catalog import JsonFileCatalogStore
    from ndis_invoice.config import get_settings

    path = catalog or get_settings().catalog_path
    return JsonFileCatalogStore(path) if path else None


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def generate(
    request_file: str = typer.Argument(..., help="Invoice request JSON file"),
    audit_out: str = typer.Option("Audit.json", "--audit-out", help="Output audit JSON file path"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="Catalog override JSON (default: NDIS_CATALOG_PATH or built-in)"),
    randomize_travel: Optional[bool] = typer.Option(None, "--randomize-travel/--exact-travel", help="Randomize the daily travel log"),
    strict: bool = typer.Option(True, "--strict/--no-strict", help="Fail when validation reports findings (default: True)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate an invoice from a request file and write the audit JSON."""
    from ndis_invoice.audit import generate_audit
    from ndis_invoice.engine import generate_invoice, validate_invoice
    from ndis_invoice.engine.validator import format_findings
    from ndis_invoice.formatting import format_currency, format_date_display
    from ndis_invoice.request import parse_invoice_request

    _configure_logging(verbose)
    audit_path = Path(audit_out)

    try:
        data = json.loads(Path(request_file).read_text(encoding='utf-8'))
        request = parse_invoice_request(data)
    except (OSError, ValueError) as e:
        typer.echo(f"ERROR: Cannot read invoice request: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Invoice #: {request.invoice_number}")
    typer.echo(f"Client: {request.client.name} ({request.client.ndis_number})")
    typer.echo(
        f"Service period: {format_date_display(request.start_date)} - {format_date_display(request.end_date)}"
    )
    typer.echo("")

    try:
        invoice = asyncio.run(generate_invoice(
            request, _catalog_store(catalog), randomize_travel=randomize_travel,
        ))
    except (InvalidRange, IncompleteClientInfo, CatalogLoadError) as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1)

    for item in invoice.line_items:
        typer.echo(f"  {item.service_code}  {item.description}")
        typer.echo(f"    {item.quantity} x {format_currency(item.unit_rate)} = {format_currency(item.total)}")
    for warning in invoice.warnings:
        typer.echo(f"  WARNING: {warning.message}", err=True)

    typer.echo(f"\n  Subtotal: {format_currency(invoice.subtotal)}")
    typer.echo(f"  Tax:      {format_currency(invoice.tax)}")
    typer.echo(f"  TOTAL:    {format_currency(invoice.total)}")

    validation = validate_invoice(invoice)
    generate_audit(invoice, audit_path, validation)
    typer.echo(f"\nAudit file saved to: {audit_path}")

    if not validation.is_valid:
        typer.echo("\nVALIDATION FAILED:", err=True)
        typer.echo(format_findings(validation.findings), err=True)
        if strict:
            raise typer.Exit(1)
        typer.echo("\nWARNING: Continuing in non-strict mode...", err=True)
        return

    typer.echo("Validation PASSED")


@app.command("catalog-export")
def catalog_export(
    out: str = typer.Option("services.json", "--out", help="Output catalog JSON file"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="Catalog override JSON"),
) -> None:
    """Write the current service catalog to a JSON file."""
    from ndis_invoice.catalog import load_catalog

    try:
        snapshot = asyncio.run(load_catalog(_catalog_store(catalog)))
    except CatalogLoadError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1)
    Path(out).write_text(json.dumps(snapshot.to_dicts(), indent=2), encoding='utf-8')
    typer.echo(f"Exported {len(snapshot.entries)} catalog entries to {out}")


@app.command("catalog-import")
def catalog_import(
    source: str = typer.Argument(..., help="Catalog JSON file to import"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="Catalog override JSON to replace"),
) -> None:
    """Validate a catalog file and save it as the local catalog override."""
    from ndis_invoice.catalog import ServiceCatalog, load_catalog, save_catalog

    store = _catalog_store(catalog)
    if store is None:
        typer.echo("ERROR: No catalog override path; pass --catalog or set NDIS_CATALOG_PATH", err=True)
        raise typer.Exit(1)

    try:
        current = ServiceCatalog.from_snapshot(asyncio.run(load_catalog(store)))
        current.import_json(Path(source).read_text(encoding='utf-8'))
    except CatalogValidationError as e:
        typer.echo("CATALOG VALIDATION FAILED:", err=True)
        for error in e.errors:
            typer.echo(f"  ERROR: {error}", err=True)
        typer.echo("\nCatalog NOT changed.", err=True)
        raise typer.Exit(1)
    except (OSError, CatalogLoadError) as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1)

    asyncio.run(save_catalog(store, current))
    typer.echo(f"Imported {len(current.entries)} catalog entries into {store.path}")


if __name__ == "__main__":
    app()
