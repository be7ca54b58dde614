"""Centralized configuration management for the taxcredit application.

Pydantic Settings based configuration with environment variable integration,
type validation and clear error handling. Environment variables use the
TAXCREDIT_ prefix; nested sections use double underscores, for example
TAXCREDIT_CREDIT__REGION=capital or TAXCREDIT_LAYOUT__LINE_Y_TOLERANCE=12.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Region = Literal["capital", "non-capital"]
CompanySize = Literal["small", "middle", "large"]


class LayoutConfig(BaseModel):
    """Spatial tolerances used to assemble glyphs into words and lines."""

    model_config = ConfigDict(frozen=True)

    word_y_tolerance: float = Field(
        default=5.0, gt=0, description="Max vertical offset for glyphs in one word"
    )
    word_x_gap: float = Field(
        default=5.0, gt=0, description="Max horizontal gap for glyphs in one word"
    )
    line_y_tolerance: float = Field(
        default=10.0, gt=0, description="Max vertical offset for words in one line"
    )

    @model_validator(mode="after")
    def validate_line_looser_than_word(self) -> "LayoutConfig":
        """Line grouping must be coarser than word merging."""
        if self.line_y_tolerance <= self.word_y_tolerance:
            raise ValueError(
                "line_y_tolerance must be strictly larger than word_y_tolerance"
            )
        return self


class ExtractionConfig(BaseModel):
    """Document extraction settings."""

    model_config = ConfigDict(frozen=True)

    classifier_pages: int = Field(
        default=3, ge=1, le=20, description="Pages inspected by the classifier"
    )
    month_column_max_x: float = Field(
        default=100.0, gt=0, description="Month labels must start left of this x"
    )
    value_x_tolerance: float = Field(
        default=40.0, gt=0, description="Horizontal tolerance for ledger cells"
    )
    value_y_tolerance: float = Field(
        default=5.0, gt=0, description="Vertical tolerance for ledger cells"
    )
    min_tax_credit_amount: int = Field(
        default=10000, ge=0, description="Tax-credit amounts below this are noise"
    )
    max_pages: int | None = Field(
        default=None, ge=1, description="Optional per-document page budget"
    )


class CreditConfig(BaseModel):
    """Company profile consumed by the credit engines."""

    model_config = ConfigDict(frozen=True)

    region: Region = Field(default="non-capital", description="Head office region")
    size: CompanySize = Field(default="small", description="Company size class")
    is_new_growth: bool = Field(
        default=False,
        description="New-growth service business (raises social insurance factor)",
    )


class DataConfig(BaseModel):
    """Data input and output locations."""

    model_config = ConfigDict(frozen=True)

    raw_data_path: Path = Field(
        default=Path("data/raw"), description="Directory holding source PDFs"
    )
    processed_data_path: Path = Field(
        default=Path("data/processed"), description="Directory for parquet output"
    )


class TaxCreditSettings(BaseSettings):
    """Main application settings with environment variable integration.

    Environment variables are loaded with the TAXCREDIT_ prefix.
    For nested configs, use double underscores: TAXCREDIT_CREDIT__SIZE
    """

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    credit: CreditConfig = Field(default_factory=CreditConfig)
    data: DataConfig = Field(default_factory=DataConfig)

    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TAXCREDIT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


_settings: TaxCreditSettings | None = None


def get_settings() -> TaxCreditSettings:
    """Get the cached settings instance.

    Returns:
        TaxCreditSettings: The configuration instance

    Raises:
        ValueError: If configuration is invalid
    """
    global _settings

    if _settings is not None:
        return _settings

    try:
        _settings = TaxCreditSettings()
    except Exception as e:
        raise ValueError(f"Configuration error: {e}") from e
    return _settings


def reload_settings() -> TaxCreditSettings:
    """Reload settings from environment variables.

    Returns:
        TaxCreditSettings: The reloaded configuration instance
    """
    clear_settings_cache()
    return get_settings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next access reloads them."""
    global _settings
    _settings = None


def get_layout_config() -> LayoutConfig:
    """Get the layout tolerances."""
    return get_settings().layout


def get_extraction_config() -> ExtractionConfig:
    """Get the extraction settings."""
    return get_settings().extraction


def get_credit_config() -> CreditConfig:
    """Get the company profile used by the credit engines."""
    return get_settings().credit


def get_processed_data_path() -> Path:
    """Get the configured output directory."""
    return get_settings().data.processed_data_path


def get_raw_data_path() -> Path:
    """Get the directory searched for source PDFs."""
    return get_settings().data.raw_data_path
