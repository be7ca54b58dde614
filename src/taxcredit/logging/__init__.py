"""Centralized logging configuration for the taxcredit application.

Standard usage:
    ```python
    import logging
    from taxcredit.logging import document_context, setup_logging

    # Configure once at application startup
    setup_logging()

    # Get loggers in each module
    logger = logging.getLogger(__name__)

    # Tag records with the PDF being processed
    with document_context(path):
        logger.info("Extracting")
    ```
"""

from .config import (
    DocumentContextFilter,
    LoggingConfig,
    current_document,
    document_context,
    setup_logging,
)

__all__ = [
    "DocumentContextFilter",
    "LoggingConfig",
    "current_document",
    "document_context",
    "setup_logging",
]
