"""
Summaries over enriched trips.

Provides:
- Per-period averages and maxima of the derived metrics
- Top trips by tip per mile
- JSON report writing
"""
from __future__ import annotations

import json
import os
from datetime import datetime
from typing import Any, Dict, List

from pyspark.sql import DataFrame
from pyspark.sql import functions as F

from .logging_config import get_logger

logger = get_logger(__name__)

SUMMARY_METRICS = [
    "speed_mph",
    "tip_per_distance",
    "trip_distance",
    "fare_amount",
]

TOP_TRIP_COLUMNS = [
    "tpep_pickup_datetime",
    "time_period",
    "trip_distance",
    "tip_amount",
    "tip_per_distance",
    "pickup_latitude",
    "pickup_longitude",
]


def period_summary(df: DataFrame) -> DataFrame:
    """Trip count, average and maximum of each metric per time period."""
    aggs = [F.count(F.lit(1)).alias("trip_count")]
    for metric in SUMMARY_METRICS:
        aggs.append(F.round(F.avg(metric), 2).alias(f"avg_{metric}"))
        aggs.append(F.max(metric).alias(f"max_{metric}"))
    return df.groupBy("time_period").agg(*aggs).orderBy("time_period")


def top_tip_per_distance(df: DataFrame, k: int = 10) -> DataFrame:
    """The ``k`` trips with the highest tip per mile."""
    if k <= 0:
        raise ValueError(f"k must be positive, got {k}")
    return (
        df.select(*TOP_TRIP_COLUMNS)
        .orderBy(F.col("tip_per_distance").desc(), F.col("tpep_pickup_datetime"))
        .limit(k)
    )


def write_summary_report(
    periods: List[Dict[str, Any]],
    top_trips: List[Dict[str, Any]],
    reject_counts: Dict[str, int],
    reports_dir: str,
) -> str:
    """Write the run's summary as ``period_summary.json`` and return its path."""
    os.makedirs(reports_dir, exist_ok=True)
    report = {
        "timestamp": datetime.utcnow().isoformat(),
        "periods": periods,
        "top_tip_per_distance": top_trips,
        "rejected": {
            "total": sum(reject_counts.values()),
            "by_reason": reject_counts,
        },
    }
    report_path = os.path.join(reports_dir, "period_summary.json")
    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, default=str)
    logger.info(f"Summary report written to {report_path}")
    return report_path
