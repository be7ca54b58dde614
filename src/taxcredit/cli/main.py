"""Main CLI application for taxcredit.

This module provides the unified entry point for all taxcredit CLI
operations: document extraction and credit calculation.
"""

import logging
from typing import Annotated

import typer

from ..config import get_settings
from ..logging import setup_logging
from .commands import calculate, extract

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="taxcredit",
    help="taxcredit: Employment tax credit review from payroll and tax PDFs",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose debug logging",
        ),
    ] = False,
) -> None:
    """Global options for the taxcredit CLI.

    Examples:
      taxcredit extract run ledger_2023.pdf registry.pdf --output data/processed
      taxcredit calculate run data/raw/*.pdf --size small --region capital
    """
    setup_logging(cli_mode=True, verbose=verbose or get_settings().debug)


app.add_typer(extract.app, name="extract", help="Extract records from PDF documents")
app.add_typer(calculate.app, name="calculate", help="Calculate employment tax credits")


def main() -> None:
    """Entry point for the taxcredit CLI application."""
    app()


if __name__ == "__main__":
    main()
