# TerraField ETL Quality - Core Configuration
# Typed, environment-driven settings for the quality and transformation engine

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from etl_quality.core.exceptions import ConfigurationException


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class QualityConfig(BaseSettings):
    """Heuristics and penalties used by the quality analyzer."""

    model_config = SettingsConfigDict(env_prefix="ETLQ_QUALITY_")

    # Column-name heuristics (matched case-insensitively as substrings)
    numeric_keywords: list[str] = Field(
        default=["value", "price", "area", "feet", "cost", "fee"],
        description="Column name fragments that mark a numeric column"
    )
    year_keywords: list[str] = Field(default=["year"])
    date_keywords: list[str] = Field(default=["date", "year"])
    id_column: str = Field(default="id", description="Column treated as the record identifier")

    # Missing-value thresholds (percent of all cells)
    missing_report_threshold: float = Field(default=5.0, ge=0.0, le=100.0)
    missing_medium_threshold: float = Field(default=10.0, ge=0.0, le=100.0)
    missing_high_threshold: float = Field(default=20.0, ge=0.0, le=100.0)
    missing_summary_min_fields: int = Field(
        default=2,
        ge=0,
        description="Fields with gaps needed before the aggregate 'multiple' issue is reported"
    )

    # Score deductions
    non_numeric_penalty: int = Field(default=5, ge=0, le=100)
    negative_value_penalty: int = Field(default=3, ge=0, le=100)
    future_year_penalty: int = Field(default=2, ge=0, le=100)
    row_shape_penalty: int = Field(default=10, ge=0, le=100)
    duplicate_id_penalty: int = Field(default=15, ge=0, le=100)

    # Rows handed to a summary enhancer
    enhancer_sample_rows: int = Field(default=5, ge=1, le=100)

    @field_validator("numeric_keywords", "year_keywords", "date_keywords")
    @classmethod
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        return [k.strip().lower() for k in v if k and k.strip()]

    @model_validator(mode="after")
    def check_threshold_order(self) -> "QualityConfig":
        if not (
            self.missing_report_threshold
            <= self.missing_medium_threshold
            <= self.missing_high_threshold
        ):
            raise ValueError("missing thresholds must be ordered report <= medium <= high")
        return self


class TransformConfig(BaseSettings):
    """Defaults applied by transformation operations."""

    model_config = SettingsConfigDict(env_prefix="ETLQ_TRANSFORM_")

    min_year: int = Field(default=1000, description="Lowest number treated as a calendar year")
    max_year: int = Field(default=9999, description="Highest number treated as a calendar year")
    quality_score_column: str = Field(default="qualityScore")
    default_fill_value: str = Field(default="N/A")


class Settings(BaseSettings):
    """Main engine settings - cached singleton via get_settings()."""

    model_config = SettingsConfigDict(
        env_prefix="ETLQ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = Field(default="TerraField ETL Quality")
    app_version: str = Field(default="1.0.0")

    # Logging
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="text")  # json or text

    # Nested configurations
    quality: QualityConfig = Field(default_factory=QualityConfig)
    transform: TransformConfig = Field(default_factory=TransformConfig)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"json", "text"}:
            raise ValueError("log_format must be 'json' or 'text'")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once from the environment (and `.env`); pass an
    explicit `Settings` to the engines to override them per call.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationException(f"Invalid engine settings: {e}", cause=e) from e
