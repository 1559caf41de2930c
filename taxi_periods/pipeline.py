#!/usr/bin/env python
"""
Trip enrichment pipeline - main script.

This script handles the complete batch run:
1. Read the monthly trip files of one year
2. Classify every trip (admit or reject with a reason)
3. Enrich admitted trips with period label, speed and tip per mile
4. Write the enriched trips as parquet
5. Write per-period summaries and the top tippers as a JSON report

Usage:
    # Whole year
    python -m taxi_periods.pipeline --year 2015

    # A few months, continuing past missing files
    python -m taxi_periods.pipeline --year 2015 --start-month 1 --end-month 3 --skip-missing
"""
from __future__ import annotations

import argparse
import sys
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .config import (
    DataRangeConfig,
    PathsConfig,
    ValidationConfig,
    load_paths_config,
    load_spark_config,
    load_validation_config,
)
from .logging_config import PipelineLogger, configure_file_logging
from .spark_enrich import classify_trips, enrich_trips, reject_counts
from .spark_io import monthly_paths, read_trip_csv, validate_paths_exist, write_enriched
from .spark_session import create_spark_session
from .summaries import period_summary, top_tip_per_distance, write_summary_report

DEFAULT_TOP_K = 10
STATUS_SUCCESS = "success"
STATUS_LOW_RETENTION = "low_retention"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    paths = load_paths_config()
    parser = argparse.ArgumentParser(
        description="Validate NYC taxi trips and assign half-hour periods",
    )
    parser.add_argument("--year", type=int, required=True, help="Year of trip data (e.g., 2015)")
    parser.add_argument("--start-month", type=int, default=1, help="First month (default: 1)")
    parser.add_argument("--end-month", type=int, default=12, help="Last month (default: 12)")
    parser.add_argument(
        "--input-dir",
        default=paths.input_dir,
        help=f"Directory with yellow_tripdata_YYYY-MM.csv files (default: {paths.input_dir})",
    )
    parser.add_argument(
        "--output-dir",
        default=paths.output_dir,
        help=f"Parquet output directory (default: {paths.output_dir})",
    )
    parser.add_argument(
        "--reports-dir",
        default=paths.reports_dir,
        help=f"Directory for reports (default: {paths.reports_dir})",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=DEFAULT_TOP_K,
        help=f"Number of top trips by tip per mile to report (default: {DEFAULT_TOP_K})",
    )
    parser.add_argument(
        "--skip-missing",
        action="store_true",
        help="Skip missing monthly files instead of failing",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Check input availability without processing",
    )
    return parser.parse_args(argv)


def run_pipeline(
    data_range: DataRangeConfig,
    paths: PathsConfig,
    validation: ValidationConfig,
    top_k: int = DEFAULT_TOP_K,
    skip_missing: bool = False,
) -> dict:
    """
    Run the complete enrichment.

    Parameters
    ----------
    data_range : DataRangeConfig
        Year and months to process
    paths : PathsConfig
        Input, output and report locations
    validation : ValidationConfig
        Validation thresholds and bucket width
    top_k : int
        Number of top trips by tip per mile to report
    skip_missing : bool
        If True, skip missing monthly files instead of failing

    Returns
    -------
    dict
        Status, row counts, reject counts and output locations. The
        status is ``low_retention`` when fewer than 80% of loaded trips
        were admitted.
    """
    plog = PipelineLogger("trip_enrichment")
    configure_file_logging(plog.logger, paths.logs_dir)

    spark = create_spark_session("taxi-periods", load_spark_config())
    try:
        input_paths = monthly_paths(paths.input_dir, data_range)

        plog.stage_start("load", files=len(input_paths))
        raw = read_trip_csv(spark, input_paths, fail_on_missing=not skip_missing)
        classified = classify_trips(raw, validation).cache()
        plog.stage_end("load", row_count=classified.count())

        plog.stage_start("validate")
        counts = reject_counts(classified)
        plog.record_rejects(counts)
        enriched = enrich_trips(classified, validation).cache()
        plog.stage_end("validate", row_count=enriched.count())
        retention_ok = plog.verify_retention("load", "validate")

        plog.stage_start("write", output=paths.output_dir)
        write_enriched(enriched, paths.output_dir)
        plog.stage_end("write")

        plog.stage_start("summarise", top_k=top_k)
        periods = [row.asDict() for row in period_summary(enriched).collect()]
        top_trips = [row.asDict() for row in top_tip_per_distance(enriched, top_k).collect()]
        report_path = write_summary_report(periods, top_trips, counts, paths.reports_dir)
        plog.stage_end("summarise", row_count=len(periods))

        plog.summary()
        return build_result(plog, counts, retention_ok, paths.output_dir, report_path)
    finally:
        spark.stop()


def build_result(
    plog: PipelineLogger,
    counts: Dict[str, int],
    retention_ok: bool,
    output_dir: str,
    report_path: str,
) -> dict:
    """Collect the run outcome; a failed retention check marks the run."""
    status = STATUS_SUCCESS if retention_ok else STATUS_LOW_RETENTION
    if not retention_ok:
        plog.logger.error(f"Pipeline finished with status={status}: too many trips rejected")
    return {
        "status": status,
        "retention_ok": retention_ok,
        "loaded": plog.metrics["load"]["row_count"],
        "admitted": plog.metrics["validate"]["row_count"],
        "rejected": dict(counts),
        "output_dir": output_dir,
        "report": report_path,
    }


def dry_run(data_range: DataRangeConfig, paths: PathsConfig) -> bool:
    """Report which monthly files are available; True when none is missing."""
    plog = PipelineLogger("trip_enrichment")
    spark = create_spark_session("taxi-periods-dry-run", load_spark_config())
    try:
        existing, missing = validate_paths_exist(spark, monthly_paths(paths.input_dir, data_range))
    finally:
        spark.stop()
    plog.logger.info(f"Available: {existing if existing else 'None'}")
    plog.logger.info(f"Missing:   {missing if missing else 'None'}")
    return not missing


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    load_dotenv()
    args = parse_args(argv)

    data_range = DataRangeConfig(
        year=args.year,
        start_month=args.start_month,
        end_month=args.end_month,
    )
    defaults = load_paths_config()
    paths = PathsConfig(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        reports_dir=args.reports_dir,
        logs_dir=defaults.logs_dir,
    )

    if args.dry_run:
        sys.exit(0 if dry_run(data_range, paths) else 2)

    try:
        result = run_pipeline(
            data_range=data_range,
            paths=paths,
            validation=load_validation_config(),
            top_k=args.top_k,
            skip_missing=args.skip_missing,
        )
    except FileNotFoundError as e:
        print(f"\n{e}")
        sys.exit(2)  # Special exit code for missing data

    if result["status"] != STATUS_SUCCESS:
        sys.exit(1)


if __name__ == "__main__":
    main()
