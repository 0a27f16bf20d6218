from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from propreport.adapters.config import config
from propreport.services.normalize import coerce_non_negative
from propreport.services.rendering import render_text_report
from propreport.services.report_generator import ReportGenerationError, generate_report
from propreport.services.report_view import build_report_view

app = typer.Typer(help="Property report builder (generate reports, compute investment metrics).")


def _emit(view: dict, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(view, indent=2))
    else:
        typer.echo(render_text_report(view), nl=False)


@app.command("metrics")
def metrics_cmd(
    report_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved report JSON"),
    as_json: bool = typer.Option(False, "--json", help="Print the report view as JSON"),
) -> None:
    """
    Compute NOI, cap rate, DSCR and cash flow for a saved report.
    """
    try:
        report = json.loads(report_path.read_text(encoding="utf-8"))
    except ValueError as e:
        typer.echo(f"invalid JSON in {report_path}: {e}", err=True)
        raise typer.Exit(code=2) from e

    view = build_report_view(report)
    if view["warnings"]:
        logger.warning("Report does not match schema", path=str(report_path), problems=len(view["warnings"]))
    _emit(view, as_json)


@app.command("generate")
def generate_cmd(
    address: str = typer.Option(..., "--address", help="Property address"),
    price: Optional[str] = typer.Option(None, "--price", help="Purchase price, e.g. 500000 or $500,000"),
    overrides: Optional[str] = typer.Option(
        None, "--overrides", help='Free-form assumptions, e.g. "self-managed; rate 7.6%; down 25%"'
    ),
    save: Optional[Path] = typer.Option(None, "--save", help="Write the raw report JSON here"),
    as_json: bool = typer.Option(False, "--json", help="Print the report view as JSON"),
) -> None:
    """
    Ask the generation service for a report and print it.
    """
    purchase_price = coerce_non_negative(price, 0.0) or None
    logger.info("Generating report", address=address, model=config.OPENAI_MODEL)

    try:
        report = generate_report(address, purchase_price, overrides, settings=config)
    except ReportGenerationError as e:
        typer.echo(json.dumps(e.body), err=True)
        raise typer.Exit(code=1) from e

    if save is not None:
        save.write_text(json.dumps(report, indent=2), encoding="utf-8")
        logger.info("Report saved", path=str(save))

    _emit(build_report_view(report), as_json)


if __name__ == "__main__":
    app()
