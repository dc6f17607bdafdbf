"""CLI commands for scanning slips from the command line."""

from __future__ import annotations

import json
from pathlib import Path

import click
from flask import Flask
from flask.cli import with_appcontext

from slipscan.api.schemas import ScanResultSchema
from slipscan.services.exceptions import SpreadsheetError
from slipscan.services.slip_parser import parse_slip_text
from slipscan.services.slip_scanner import ProgressEvent, ScanResult, SlipUpload, get_slip_scanner
from slipscan.services.spreadsheet import SlipRow, export_rows


@click.group("slips")
def slips_cli() -> None:
    """Slip scanning commands."""


def register_commands(app: Flask) -> None:
    """Register CLI commands with the application."""
    app.cli.add_command(slips_cli)

    slips_cli.add_command(scan)
    slips_cli.add_command(parse_text)


def _echo_progress(event: ProgressEvent) -> None:
    click.echo(f"[{event.percent:3d}%] {event.message}", err=True)


def _print_table(results: list[ScanResult]) -> None:
    click.echo(f"{'#':>4}  {'Amount':<18}  Memo")
    for result in results:
        order, amount, memo = result.to_row()
        click.echo(f"{order:>4}  {amount:<18}  {memo}")


@click.command("scan")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option(
    "--export",
    "export_path",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Also write the results to an Excel file",
)
@click.option("--start-order", type=click.IntRange(min=1), default=1, show_default=True, help="Number of the first row")
@with_appcontext
def scan(paths: tuple[Path, ...], as_json: bool, export_path: Path | None, start_order: int) -> None:
    """Read amount and memo from slip images."""
    scanner = get_slip_scanner()
    if scanner is None:
        raise click.ClickException("OCR engine is not available. Is Tesseract installed?")

    uploads = [SlipUpload(filename=path.name, data=path.read_bytes()) for path in paths]
    results = scanner.scan_batch(uploads, on_progress=_echo_progress, start_order=start_order)

    if as_json:
        click.echo(json.dumps(ScanResultSchema(many=True).dump(results), ensure_ascii=False, indent=2))
    else:
        _print_table(results)

    if export_path is not None:
        rows = [SlipRow(*result.to_row()) for result in results]
        try:
            export_path.write_bytes(export_rows(rows))
        except SpreadsheetError as e:
            raise click.ClickException(str(e)) from e
        click.echo(f"✅ Exported {len(rows)} rows to {export_path}", err=True)

    failed = sum(1 for result in results if result.failed)
    if failed:
        click.echo(f"⚠️  {failed} of {len(results)} slips could not be read", err=True)


@click.command("parse-text")
@click.argument("file", type=click.File("r", encoding="utf-8"))
def parse_text(file) -> None:
    """Extract amount and memo from OCR text (use - for stdin)."""
    slip_data = parse_slip_text(file.read())
    click.echo(json.dumps(slip_data.to_dict(), ensure_ascii=False))
