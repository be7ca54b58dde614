"""taxcredit CLI package.

This package provides the command-line interface for extracting documents
and calculating employment tax credits.
"""

from .main import app, main

__all__ = ["app", "main"]
