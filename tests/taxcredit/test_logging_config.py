"""Tests for centralized logging configuration."""

import logging
import sys
from collections.abc import Generator
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, cast

import pytest

from taxcredit.logging.config import (
    DocumentContextFilter,
    LoggingConfig,
    current_document,
    document_context,
    setup_logging,
)


def _force_config(log_to_file: bool = False, **kwargs: Any) -> LoggingConfig:
    """Return a LoggingConfig that forces handler replacement."""
    return LoggingConfig(log_to_file=log_to_file, force_reconfigure=True, **kwargs)


def _console_handlers() -> list[logging.Handler]:
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
    ]


class TestSetupLogging:
    """Tests for setup_logging handler configuration."""

    @pytest.fixture(autouse=True)
    def _reset_root_logger(self) -> Generator[None, Any, None]:
        """Remove handlers added during each test to avoid leaking state."""
        root = logging.getLogger()
        original_handlers = list(root.handlers)
        original_level = root.level
        yield
        for handler in root.handlers:
            if handler not in original_handlers:
                handler.close()
        root.handlers = original_handlers
        root.setLevel(original_level)

    @pytest.mark.unit
    def test_console_handler_uses_stderr(self) -> None:
        """Console output must stay off stdout so tables can be piped."""
        setup_logging(config=_force_config(), cli_mode=True)

        handlers = _console_handlers()
        assert handlers, "Expected at least one StreamHandler"
        for h in handlers:
            stream: object = getattr(cast(Any, h), "stream", None)
            assert stream is sys.stderr

    @pytest.mark.unit
    def test_cli_mode_prefixes_messages_with_document(self) -> None:
        setup_logging(config=_force_config(), cli_mode=True)

        [handler] = _console_handlers()
        assert handler.formatter is not None
        record = logging.LogRecord("taxcredit", logging.INFO, "", 0, "3 rows", (), None)
        with document_context("uploads/ledger_2023.pdf"):
            handler.filter(record)
        assert handler.format(record) == "[ledger_2023.pdf] 3 rows"

    @pytest.mark.unit
    def test_verbose_enables_debug(self) -> None:
        setup_logging(config=_force_config(level="WARNING"), verbose=True)

        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.unit
    def test_pdfminer_is_quieted(self) -> None:
        setup_logging(config=_force_config(), verbose=True)

        assert logging.getLogger("pdfminer").level == logging.WARNING

    @pytest.mark.unit
    def test_rotating_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "taxcredit.log"

        setup_logging(config=_force_config(log_to_file=True, log_file_path=log_file))

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount == 5
        assert log_file.parent.is_dir()

    @pytest.mark.unit
    def test_file_log_names_the_document(self, tmp_path: Path) -> None:
        log_file = tmp_path / "taxcredit.log"
        setup_logging(config=_force_config(log_to_file=True, log_file_path=log_file))

        with document_context("ledger_2022.pdf"):
            logging.getLogger("taxcredit.test").warning("no month rows")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "[ledger_2022.pdf] no month rows" in log_file.read_text("utf-8")


class TestLoggingConfigFromEnvironment:
    """Environment variable loading."""

    @pytest.mark.unit
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TAXCREDIT_LOG_LEVEL", "debug")
        monkeypatch.setenv("TAXCREDIT_LOG_TO_FILE", "false")
        monkeypatch.setenv("TAXCREDIT_LOG_BACKUP_COUNT", "2")

        config = LoggingConfig.from_environment()

        assert config.level == "DEBUG"
        assert config.log_to_file is False
        assert config.backup_count == 2

    @pytest.mark.unit
    def test_unprefixed_variables_are_ignored(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("TAXCREDIT_LOG_LEVEL", raising=False)
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        assert LoggingConfig.from_environment().level == "INFO"


def _record(message: str = "msg") -> logging.LogRecord:
    return logging.LogRecord("taxcredit", logging.WARNING, "", 0, message, (), None)


class TestDocumentContext:
    """Tagging records with the PDF being processed."""

    @pytest.mark.unit
    def test_outside_any_document(self) -> None:
        record = _record()

        assert DocumentContextFilter().filter(record)

        assert cast(Any, record).document == "-"
        assert cast(Any, record).document_prefix == ""

    @pytest.mark.unit
    def test_inside_a_document_uses_the_file_name(self) -> None:
        record = _record()

        with document_context(Path("data/raw/registry.pdf")):
            assert current_document() == "registry.pdf"
            DocumentContextFilter().filter(record)

        assert cast(Any, record).document == "registry.pdf"
        assert cast(Any, record).document_prefix == "[registry.pdf] "
        assert current_document() is None

    @pytest.mark.unit
    def test_nested_contexts_restore_the_outer_document(self) -> None:
        with document_context("outer.pdf"):
            with document_context("inner.pdf"):
                assert current_document() == "inner.pdf"
            assert current_document() == "outer.pdf"

    @pytest.mark.unit
    def test_context_is_reset_after_an_error(self) -> None:
        with pytest.raises(ValueError):
            with document_context("broken.pdf"):
                raise ValueError("bad page")

        assert current_document() is None
