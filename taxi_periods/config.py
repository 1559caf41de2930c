"""
Configuration module for the trip enrichment pipeline.

Supports:
- Validation thresholds and period bucket width
- Data range (one year, a span of months)
- Local paths and Spark session settings
"""

from __future__ import annotations

import os
from dataclasses import dataclass

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class ValidationConfig:
    """Thresholds used by the record validator and the period assigner."""
    earth_radius_miles: float = 3958.756
    bucket_minutes: int = 30
    min_journey_seconds: int = 300
    min_trip_distance: float = 0.1
    voided_payment_type: int = 6

    def __post_init__(self):
        if self.bucket_minutes <= 0 or MINUTES_PER_DAY % self.bucket_minutes:
            raise ValueError(
                f"bucket_minutes must divide a day evenly, got {self.bucket_minutes}"
            )
        if self.earth_radius_miles <= 0:
            raise ValueError("earth_radius_miles must be positive")
        if self.min_journey_seconds <= 0 or self.min_trip_distance <= 0:
            raise ValueError("minimum journey time and trip distance must be positive")

    @property
    def buckets_per_day(self) -> int:
        return MINUTES_PER_DAY // self.bucket_minutes


DEFAULT_VALIDATION = ValidationConfig()


@dataclass(frozen=True)
class DataRangeConfig:
    """Input data range: months of a single year."""
    year: int
    start_month: int = 1
    end_month: int = 12
    prefix: str = "yellow"


@dataclass(frozen=True)
class PathsConfig:
    """Local paths configuration."""
    input_dir: str = "data/raw"
    output_dir: str = "data/enriched"
    reports_dir: str = "reports"
    logs_dir: str = "logs"


@dataclass(frozen=True)
class SparkConfig:
    """Spark session settings."""
    master: str = "local[*]"
    shuffle_partitions: int = 8


def _get_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise EnvironmentError(f"Missing required environment variable: {name}")
    return value


def load_validation_config() -> ValidationConfig:
    """Load validation thresholds from environment (all optional)."""
    return ValidationConfig(
        earth_radius_miles=float(os.getenv("EARTH_RADIUS_MILES", "3958.756")),
        bucket_minutes=int(os.getenv("PERIOD_BUCKET_MINUTES", "30")),
        min_journey_seconds=int(os.getenv("MIN_JOURNEY_SECONDS", "300")),
        min_trip_distance=float(os.getenv("MIN_TRIP_DISTANCE", "0.1")),
        voided_payment_type=int(os.getenv("VOIDED_PAYMENT_TYPE", "6")),
    )


def load_data_range_config() -> DataRangeConfig:
    """Load dataset range from environment variables.

    Required:
    - DATA_YEAR

    Optional:
    - DATA_START_MONTH, DATA_END_MONTH (default: the whole year)
    """
    return DataRangeConfig(
        year=int(_get_env("DATA_YEAR")),
        start_month=int(os.getenv("DATA_START_MONTH", "1")),
        end_month=int(os.getenv("DATA_END_MONTH", "12")),
    )


def load_paths_config() -> PathsConfig:
    """Load local paths config (override optional)."""
    return PathsConfig(
        input_dir=os.getenv("INPUT_DIR", "data/raw"),
        output_dir=os.getenv("OUTPUT_DIR", "data/enriched"),
        reports_dir=os.getenv("REPORTS_DIR", "reports"),
        logs_dir=os.getenv("LOGS_DIR", "logs"),
    )


def load_spark_config() -> SparkConfig:
    """Load Spark session settings from environment."""
    return SparkConfig(
        master=os.getenv("SPARK_MASTER", "local[*]"),
        shuffle_partitions=int(os.getenv("SPARK_SHUFFLE_PARTITIONS", "8")),
    )
