"""Tests for the extract and calculate CLI commands.

Extraction is mocked; these tests cover argument parsing, exit codes and
the wiring from command-line options into the credit configuration.
"""

from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture
from typer.testing import CliRunner

from taxcredit.cli.commands.calculate import resolve_credit_config
from taxcredit.cli.main import app
from taxcredit.extractors.schemas import (
    EmployeeRecord,
    RegistryRecord,
    WithholdingLedger,
)
from taxcredit.pipeline import BatchResult, run_credit_engines

runner = CliRunner()


def sample_batch() -> BatchResult:
    employees = [
        EmployeeRecord(
            year=year,
            name=f"직원{index}",
            resident_id=f"{800101 + index}-1******",
            hire_date=date(2015, 1, 1),
            monthly_salary={month: 3_000_000 for month in range(1, 13)},
        )
        for year, count in ((2022, 5), (2023, 7))
        for index in range(count)
    ]
    ledgers = [
        WithholdingLedger(
            source_file=f"ledger_{year}.pdf",
            year=year,
            employees=[e for e in employees if e.year == year],
        )
        for year in (2022, 2023)
    ]
    registry = RegistryRecord(
        source_file="registry.pdf", address="서울특별시 강남구", is_capital_area=True
    )
    return BatchResult(documents=[*ledgers, registry])


@pytest.fixture(autouse=True)
def quiet_logging(mocker: MockerFixture) -> MagicMock:
    """Keep the CLI callback from installing log handlers."""
    return mocker.patch("taxcredit.cli.main.setup_logging")


class TestExtractCommand:
    """taxcredit extract run."""

    @pytest.mark.unit
    def test_reports_processed_count(self, mocker: MockerFixture) -> None:
        batch = sample_batch()
        batch.failures["broken.pdf"] = "not a PDF"
        mocker.patch(
            "taxcredit.cli.commands.extract.extract_batch", return_value=batch
        )

        result = runner.invoke(
            app,
            ["extract", "run", "ledger_2022.pdf", "ledger_2023.pdf", "registry.pdf"],
        )

        assert result.exit_code == 0, result.output
        assert "Processed 3 of 3 files" in result.output

    @pytest.mark.unit
    def test_writes_tables_to_output(
        self, mocker: MockerFixture, tmp_path: Path
    ) -> None:
        mocker.patch(
            "taxcredit.cli.commands.extract.extract_batch",
            return_value=sample_batch(),
        )

        result = runner.invoke(
            app, ["extract", "run", "ledger_2022.pdf", "--output", str(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "employees.parquet").exists()
        assert not (tmp_path / "tax_credits.parquet").exists()

    @pytest.mark.unit
    def test_save_uses_configured_directory(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("TAXCREDIT_DATA__PROCESSED_DATA_PATH", str(tmp_path))
        mocker.patch(
            "taxcredit.cli.commands.extract.extract_batch",
            return_value=sample_batch(),
        )

        result = runner.invoke(app, ["extract", "run", "a.pdf", "--save"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "employees.parquet").exists()

    @pytest.mark.unit
    def test_defaults_to_raw_data_directory(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        (tmp_path / "ledger_2023.pdf").write_bytes(b"%PDF-1.4")
        (tmp_path / "notes.txt").write_text("ignored")
        monkeypatch.setenv("TAXCREDIT_DATA__RAW_DATA_PATH", str(tmp_path))
        extract = mocker.patch(
            "taxcredit.cli.commands.extract.extract_batch",
            return_value=sample_batch(),
        )

        result = runner.invoke(app, ["extract", "run"])

        assert result.exit_code == 0, result.output
        extract.assert_called_once_with([tmp_path / "ledger_2023.pdf"])

    @pytest.mark.unit
    def test_exit_code_when_no_pdfs_found(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("TAXCREDIT_DATA__RAW_DATA_PATH", str(tmp_path))

        result = runner.invoke(app, ["extract", "run"])

        assert result.exit_code == 1

    @pytest.mark.unit
    def test_exit_code_when_nothing_processed(self, mocker: MockerFixture) -> None:
        mocker.patch(
            "taxcredit.cli.commands.extract.extract_batch",
            return_value=BatchResult(failures={"a.pdf": "broken"}),
        )

        result = runner.invoke(app, ["extract", "run", "a.pdf"])

        assert result.exit_code == 1
        assert "Processed 0 of 1 files" in result.output

    @pytest.mark.unit
    def test_verbose_flag_reaches_logging(
        self, mocker: MockerFixture, quiet_logging: MagicMock
    ) -> None:
        mocker.patch(
            "taxcredit.cli.commands.extract.extract_batch",
            return_value=sample_batch(),
        )

        runner.invoke(app, ["--verbose", "extract", "run", "a.pdf"])

        quiet_logging.assert_called_once_with(cli_mode=True, verbose=True)


class TestCalculateCommand:
    """taxcredit calculate run."""

    @pytest.fixture
    def engines(self, mocker: MockerFixture) -> MagicMock:
        mocker.patch(
            "taxcredit.cli.commands.calculate.extract_batch",
            return_value=sample_batch(),
        )
        return mocker.patch(
            "taxcredit.cli.commands.calculate.run_credit_engines",
            wraps=run_credit_engines,
        )

    @pytest.mark.unit
    def test_prints_total(self, engines: MagicMock) -> None:
        result = runner.invoke(app, ["calculate", "run", "a.pdf"])

        assert result.exit_code == 0, result.output
        assert "Total tax credit:" in result.output
        engines.assert_called_once()

    @pytest.mark.unit
    def test_region_defaults_to_registry(self, engines: MagicMock) -> None:
        runner.invoke(app, ["calculate", "run", "a.pdf"])

        config = engines.call_args.args[1]
        assert config.region == "capital"

    @pytest.mark.unit
    def test_options_override_profile(self, engines: MagicMock) -> None:
        result = runner.invoke(
            app,
            [
                "calculate",
                "run",
                "a.pdf",
                "--region",
                "non-capital",
                "--size",
                "middle",
                "--new-growth",
            ],
        )

        assert result.exit_code == 0, result.output
        config = engines.call_args.args[1]
        assert config.region == "non-capital"
        assert config.size == "middle"
        assert config.is_new_growth is True

    @pytest.mark.unit
    def test_invalid_size(self, engines: MagicMock) -> None:
        result = runner.invoke(app, ["calculate", "run", "a.pdf", "--size", "huge"])

        assert result.exit_code == 1
        engines.assert_not_called()

    @pytest.mark.unit
    def test_exit_code_when_nothing_processed(self, mocker: MockerFixture) -> None:
        mocker.patch(
            "taxcredit.cli.commands.calculate.extract_batch",
            return_value=BatchResult(),
        )

        result = runner.invoke(app, ["calculate", "run", "a.pdf"])

        assert result.exit_code == 1


class TestResolveCreditConfig:
    """Merging overrides into the configured profile."""

    @pytest.mark.unit
    def test_no_overrides_keeps_settings(self) -> None:
        config = resolve_credit_config(None, None, None)

        assert config.region == "non-capital"
        assert config.size == "small"
        assert config.is_new_growth is False

    @pytest.mark.unit
    def test_settings_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TAXCREDIT_CREDIT__SIZE", "large")

        assert resolve_credit_config("capital", None, None).size == "large"


class TestGlobalOptions:
    """Options handled by the main callback."""

    @pytest.mark.unit
    def test_debug_setting_enables_verbose_logging(
        self,
        mocker: MockerFixture,
        monkeypatch: pytest.MonkeyPatch,
        quiet_logging: MagicMock,
    ) -> None:
        monkeypatch.setenv("TAXCREDIT_DEBUG", "true")
        mocker.patch(
            "taxcredit.cli.commands.extract.extract_batch",
            return_value=sample_batch(),
        )

        runner.invoke(app, ["extract", "run", "a.pdf"])

        quiet_logging.assert_called_once_with(cli_mode=True, verbose=True)
