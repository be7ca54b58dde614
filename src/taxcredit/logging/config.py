"""Logging configuration management for the taxcredit application.

Console output is kept on stderr, optionally mirrored to a rotating log
file. While a PDF is being extracted every record is tagged with the
document's file name, so warnings from the extractors and the analysis
can be traced back to the PDF that caused them.
"""

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TAXCREDIT_LOG_"
NO_DOCUMENT = "-"

_current_document: ContextVar[str | None] = ContextVar(
    "taxcredit_document", default=None
)


@dataclass
class LoggingConfig:
    """Configuration settings for application logging."""

    level: str = "INFO"
    format_string: str = (
        "%(asctime)s - %(name)s - %(levelname)s - [%(document)s] %(message)s"
    )
    cli_format_string: str = "%(document_prefix)s%(message)s"
    log_to_file: bool = True
    log_file_path: Path = Path("logs/taxcredit.log")
    max_file_size_mb: int = 50
    backup_count: int = 5
    force_reconfigure: bool = False

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        """Create logging configuration from ``TAXCREDIT_LOG_*`` variables.

        Variables in a ``.env`` file are loaded first.

        Returns:
            LoggingConfig: Configuration loaded from environment
        """
        load_dotenv()

        def env(name: str, default: str) -> str:
            return os.getenv(f"{ENV_PREFIX}{name}", default)

        return cls(
            level=env("LEVEL", "INFO").upper(),
            log_to_file=env("TO_FILE", "true").lower() == "true",
            log_file_path=Path(env("FILE_PATH", "logs/taxcredit.log")),
            max_file_size_mb=int(env("MAX_FILE_SIZE_MB", "50")),
            backup_count=int(env("BACKUP_COUNT", "5")),
        )


class DocumentContextFilter(logging.Filter):
    """Add ``document`` and ``document_prefix`` to every record.

    ``document`` is the file name of the PDF being processed, or ``-``;
    ``document_prefix`` is ``"[name] "`` or empty, for terse console output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        document = _current_document.get()
        record.document = document or NO_DOCUMENT
        record.document_prefix = f"[{document}] " if document else ""
        return True


@contextmanager
def document_context(document: str | Path) -> Iterator[None]:
    """Tag log records emitted inside the block with ``document``'s file name."""
    token = _current_document.set(Path(document).name)
    try:
        yield
    finally:
        _current_document.reset(token)


def current_document() -> str | None:
    return _current_document.get()


def setup_logging(
    config: LoggingConfig | None = None,
    cli_mode: bool = False,
    verbose: bool = False,
) -> None:
    """Set up centralized logging configuration for the application.

    Args:
        config: Optional logging configuration. If None, loads from environment.
        cli_mode: If True, use simplified CLI-friendly formatting
        verbose: If True, enable DEBUG level logging (overrides config level)
    """
    if config is None:
        config = LoggingConfig.from_environment()

    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, config.level)

    handlers: list[logging.Handler] = []

    # Console output goes to stderr so extracted tables can be piped from stdout
    console_handler = logging.StreamHandler(sys.stderr)
    if cli_mode:
        console_handler.setFormatter(logging.Formatter(config.cli_format_string))
    else:
        console_handler.setFormatter(logging.Formatter(config.format_string))
    handlers.append(console_handler)

    if config.log_to_file:
        config.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_file_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(config.format_string))
        handlers.append(file_handler)

    document_filter = DocumentContextFilter()
    for handler in handlers:
        handler.addFilter(document_filter)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=config.force_reconfigure,
    )

    # pdfminer logs every font and content-stream warning at DEBUG/INFO
    logging.getLogger("pdfminer").setLevel(logging.WARNING)
    logging.getLogger("pdfplumber").setLevel(logging.WARNING)
