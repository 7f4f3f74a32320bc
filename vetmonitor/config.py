"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Analytics defaults in one place rather than scattered literals
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from vetmonitor.domain.models import ProgressThresholds, WindowPreset

# Load environment variables from .env file
load_dotenv()

DuplicatePolicyName = Literal["first", "last"]


class AnalyticsConfig(BaseModel):
    """Defaults for windowing, progress, timeline and export."""

    default_time_window: WindowPreset = Field(
        default=WindowPreset.LAST_30_DAYS, description="Window used when a report names none"
    )

    # Progress labelling
    moderate_threshold: float = Field(
        default=5.0, ge=0.0, description="Percent change considered moderate"
    )
    significant_threshold: float = Field(
        default=15.0, ge=0.0, description="Percent change considered significant"
    )
    inverted_keywords: list[str] = Field(
        default_factory=lambda: ["pain", "fever", "swelling"],
        description="Symptom name fragments where lower values mean improvement",
    )

    # Validation
    scale_default_min: float = Field(default=1.0, description="SCALE lower bound when unset")
    scale_default_max: float = Field(default=10.0, description="SCALE upper bound when unset")
    notes_max_length: int = Field(default=1000, gt=0, description="Ceiling for notes and TEXT")

    # Timeline zoom
    timeline_initial_range_days: float = Field(default=30.0, gt=0.0)
    timeline_min_range_days: float = Field(default=7.0, gt=0.0)
    timeline_max_range_days: float = Field(default=365.0, gt=0.0)

    # Export
    export_duplicate_policy: DuplicatePolicyName = Field(
        default="last", description="Which same-day observation an export cell shows"
    )

    @field_validator("inverted_keywords")
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        return [k.strip().lower() for k in v if k.strip()]

    @model_validator(mode="after")
    def consistent_ranges(self) -> "AnalyticsConfig":
        if self.moderate_threshold > self.significant_threshold:
            raise ValueError("moderate threshold must not exceed significant threshold")
        if self.scale_default_min > self.scale_default_max:
            raise ValueError("scale default min must not exceed scale default max")
        if not (
            self.timeline_min_range_days
            <= self.timeline_initial_range_days
            <= self.timeline_max_range_days
        ):
            raise ValueError("timeline initial range must lie within the min/max zoom range")
        return self

    @property
    def thresholds(self) -> ProgressThresholds:
        return ProgressThresholds(
            moderate=self.moderate_threshold, significant=self.significant_threshold
        )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _policy_to_literal(val: str) -> DuplicatePolicyName:
        return "first" if val.strip().lower() == "first" else "last"

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    analytics_config = AnalyticsConfig(
        default_time_window=WindowPreset(os.getenv("DEFAULT_TIME_WINDOW", "30days")),
        moderate_threshold=float(os.getenv("PROGRESS_MODERATE_THRESHOLD", "5")),
        significant_threshold=float(os.getenv("PROGRESS_SIGNIFICANT_THRESHOLD", "15")),
        scale_default_min=float(os.getenv("SCALE_DEFAULT_MIN", "1")),
        scale_default_max=float(os.getenv("SCALE_DEFAULT_MAX", "10")),
        notes_max_length=int(os.getenv("NOTES_MAX_LENGTH", "1000")),
        timeline_initial_range_days=float(os.getenv("TIMELINE_INITIAL_RANGE_DAYS", "30")),
        timeline_min_range_days=float(os.getenv("TIMELINE_MIN_RANGE_DAYS", "7")),
        timeline_max_range_days=float(os.getenv("TIMELINE_MAX_RANGE_DAYS", "365")),
        export_duplicate_policy=_policy_to_literal(os.getenv("EXPORT_DUPLICATE_POLICY", "last")),
        inverted_keywords=os.getenv("INVERTED_KEYWORDS", "pain,fever,swelling").split(","),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        analytics=analytics_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"Configuration loaded for {config.environment} environment")
    except Exception as e:
        print(f"Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()
    analytics = config.analytics

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\nANALYTICS")
    print(f"Default Window: {analytics.default_time_window.value}")
    print(
        f"Progress Thresholds: {analytics.moderate_threshold}% / {analytics.significant_threshold}%"
    )
    print(
        f"Timeline Zoom: {analytics.timeline_min_range_days}-"
        f"{analytics.timeline_max_range_days} days"
    )
    print(f"Scale Defaults: {analytics.scale_default_min:g}-{analytics.scale_default_max:g}")
    print(f"Notes Ceiling: {analytics.notes_max_length}")
    print(f"Export Duplicates: {analytics.export_duplicate_policy}")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
