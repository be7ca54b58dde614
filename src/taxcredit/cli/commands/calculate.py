"""Credit calculation commands for the taxcredit CLI.

This module runs the full pipeline, from PDF extraction through exclusion
resolution to the three credit engines, and logs the per-year summary.
"""

import logging
from pathlib import Path

import typer
from pydantic import ValidationError

from taxcredit.config import CreditConfig, get_credit_config
from taxcredit.credits import summary_to_frame
from taxcredit.pipeline import (
    build_employee_years,
    discover_documents,
    extract_batch,
    region_from_registries,
    run_credit_engines,
)

app = typer.Typer(help="Calculate employment tax credits from PDF documents")
logger = logging.getLogger(__name__)


def resolve_credit_config(
    region: str | None, size: str | None, new_growth: bool | None
) -> CreditConfig:
    """Merge command-line overrides into the configured company profile.

    Raises:
        typer.Exit: If an override is not a valid region or size
    """
    base = get_credit_config()
    overrides = {
        key: value
        for key, value in (
            ("region", region),
            ("size", size),
            ("is_new_growth", new_growth),
        )
        if value is not None
    }
    try:
        return CreditConfig.model_validate({**base.model_dump(), **overrides})
    except ValidationError as e:
        logger.error(f"❌ Invalid company profile: {e}")
        raise typer.Exit(1) from e


@app.command("run")
def calculate_credits(
    paths: list[Path] | None = typer.Argument(
        None, help="PDF files to process (default: PDFs in the raw data directory)"
    ),
    region: str | None = typer.Option(
        None,
        "--region",
        "-r",
        help="Head office region: capital or non-capital (default: from registry)",
    ),
    size: str | None = typer.Option(
        None, "--size", "-s", help="Company size: small, middle or large"
    ),
    new_growth: bool | None = typer.Option(
        None,
        "--new-growth/--no-new-growth",
        help="New-growth service business (social insurance factor 0.75)",
    ),
) -> None:
    """Extract the documents and calculate every employment tax credit.

    The head office region is taken from the corporate registry when
    ``--region`` is not given and a registry address was found.

    Args:
        paths: PDF files to process
        region: Head office region override
        size: Company size override
        new_growth: New-growth service business override
    """
    documents = discover_documents(paths)
    if not documents:
        logger.error("❌ No PDF files to process")
        raise typer.Exit(1)

    batch = extract_batch(documents)
    if batch.processed_count == 0:
        logger.error("❌ No documents could be processed")
        raise typer.Exit(1)

    if region is None:
        region = region_from_registries(batch.registries)
        if region is not None:
            logger.info(f"Head office region from registry: {region}")
    config = resolve_credit_config(region, size, new_growth)

    records = build_employee_years(batch)
    if not records:
        logger.warning("⚠️  No employee records found in the withholding ledgers")

    try:
        results = run_credit_engines(records, config)
    except Exception as e:
        logger.error(f"❌ Credit calculation failed: {e}")
        raise typer.Exit(1) from e

    logger.info(f"📊 Tax credit summary\n{summary_to_frame(results.summary)}")
    typer.echo(f"Total tax credit: {results.summary.grand_total:,} KRW")
