"""Command groups of the taxcredit CLI."""
