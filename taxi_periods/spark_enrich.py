"""
Spark integration for the record validator and the period assigner.

The per-record functions run inside Python UDFs so the Spark path makes
exactly the same decisions as the local batch path. Timestamps are handed
to the UDFs as formatted strings to keep wall-clock times independent of
the Python worker's local time zone.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pyspark.sql import Column, DataFrame
from pyspark.sql import functions as F
from pyspark.sql.types import (
    DoubleType,
    LongType,
    StringType,
    StructField,
    StructType,
)

from .config import DEFAULT_VALIDATION, ValidationConfig
from .features import enrich
from .records import COLUMN_NAMES, RawTripRecord, is_missing
from .validation import validate

REJECT_REASON_COL = "reject_reason"
_DERIVED_COL = "_derived"

_PY_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_SPARK_TIMESTAMP_FORMAT = "yyyy-MM-dd HH:mm:ss"
_TIMESTAMP_ATTRS = ("pickup_datetime", "dropoff_datetime")

DERIVED_SCHEMA = StructType([
    StructField("journey_time_seconds", LongType(), False),
    StructField("time_period", StringType(), False),
    StructField("speed_mph", DoubleType(), False),
    StructField("tip_per_distance", DoubleType(), False),
])


def _input_columns() -> list[Column]:
    cols = []
    for attr, column in COLUMN_NAMES.items():
        if attr in _TIMESTAMP_ATTRS:
            cols.append(F.date_format(F.col(column), _SPARK_TIMESTAMP_FORMAT))
        else:
            cols.append(F.col(column))
    return cols


def _to_record(values) -> RawTripRecord:
    fields = {}
    for attr, value in zip(COLUMN_NAMES, values):
        # the CSV reader parses the text "NaN" into a NaN double
        if is_missing(value):
            value = None
        elif attr in _TIMESTAMP_ATTRS:
            value = datetime.strptime(value, _PY_TIMESTAMP_FORMAT)
        fields[attr] = value
    return RawTripRecord(**fields)


def classify_trips(df: DataFrame, cfg: Optional[ValidationConfig] = None) -> DataFrame:
    """Add a ``reject_reason`` column, null for admissible trips."""
    cfg = cfg or DEFAULT_VALIDATION

    @F.udf(returnType=StringType())
    def _reason(*values):
        outcome = validate(_to_record(values), cfg)
        return None if outcome.admitted else outcome.reason.value

    return df.withColumn(REJECT_REASON_COL, _reason(*_input_columns()))


def enrich_trips(df: DataFrame, cfg: Optional[ValidationConfig] = None) -> DataFrame:
    """Keep admissible trips and add journey time, period and derived metrics.

    ``df`` may already carry a ``reject_reason`` column from
    :func:`classify_trips`; otherwise trips are classified here.
    """
    cfg = cfg or DEFAULT_VALIDATION
    if REJECT_REASON_COL not in df.columns:
        df = classify_trips(df, cfg)

    @F.udf(returnType=DERIVED_SCHEMA)
    def _derive(*values):
        outcome = validate(_to_record(values), cfg)
        # Spark may evaluate the projection before the filter
        if not outcome.admitted:
            return None
        enriched = enrich(outcome.validated, cfg)
        return (
            enriched.validated.journey_time_seconds,
            enriched.time_period,
            enriched.speed_mph,
            enriched.tip_per_distance,
        )

    admitted = df.filter(F.col(REJECT_REASON_COL).isNull()).drop(REJECT_REASON_COL)
    return (
        admitted
        .withColumn(_DERIVED_COL, _derive(*_input_columns()))
        .select(
            *admitted.columns,
            *[F.col(f"{_DERIVED_COL}.{f.name}").alias(f.name) for f in DERIVED_SCHEMA.fields],
        )
    )


def reject_counts(classified: DataFrame) -> Dict[str, int]:
    """Number of rejected trips per reason."""
    rows = (
        classified
        .filter(F.col(REJECT_REASON_COL).isNotNull())
        .groupBy(REJECT_REASON_COL)
        .count()
        .collect()
    )
    return {row[REJECT_REASON_COL]: row["count"] for row in rows}
