"""Document extraction commands for the taxcredit CLI.

This module classifies each PDF, runs the matching extractor and optionally
writes the output tables as parquet files.
"""

import logging
from pathlib import Path

import typer

from taxcredit.config import get_processed_data_path
from taxcredit.pipeline import analyze_batch, discover_documents, extract_batch
from taxcredit.reports import output_frames, save_frames

app = typer.Typer(help="Extract records from withholding, registry and tax PDFs")
logger = logging.getLogger(__name__)


@app.command("run")
def extract_documents(
    paths: list[Path] | None = typer.Argument(
        None, help="PDF files to extract (default: PDFs in the raw data directory)"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Directory for parquet output tables"
    ),
    save: bool = typer.Option(
        False, "--save", help="Write tables to the configured processed data path"
    ),
) -> None:
    """Extract every PDF and report how many were processed.

    Each file is classified as a withholding ledger, a corporate registry
    or a tax return. Files that cannot be read are logged and skipped.

    Args:
        paths: PDF files to extract
        output: Optional directory to write the employees, tax_credits,
            shareholder_ratios, executives, missing_ids and id_changes
            parquet tables to
        save: Write the tables to the configured directory when no
            ``--output`` is given
    """
    documents = discover_documents(paths)
    if not documents:
        logger.error("❌ No PDF files to extract")
        raise typer.Exit(1)

    logger.info(f"📄 Extracting {len(documents)} documents")
    try:
        batch = extract_batch(documents)
    except Exception as e:
        logger.error(f"❌ Extraction failed: {e}")
        raise typer.Exit(1) from e

    for path, reason in batch.failures.items():
        logger.warning(f"⚠️  Skipped {path}: {reason}")

    typer.echo(f"Processed {batch.processed_count} of {len(documents)} files")
    logger.info(
        f"Withholding ledgers: {len(batch.ledgers)}, registries: "
        f"{len(batch.registries)}, tax returns: {len(batch.tax_returns)}"
    )

    if output is None and save:
        output = get_processed_data_path()
    if output is not None:
        employee_years = analyze_batch(batch)
        frames = output_frames(
            employee_years.records,
            batch.tax_returns,
            batch.shareholders,
            registries=batch.registries,
            missing_ids=employee_years.missing_ids,
            id_changes=employee_years.id_changes,
        )
        written = save_frames(frames, output)
        logger.info(f"📁 Saved {len(written)} tables to {output}")

    if batch.processed_count == 0:
        raise typer.Exit(1)
