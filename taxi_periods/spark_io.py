from typing import List, Tuple

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import (
    DoubleType,
    IntegerType,
    StringType,
    StructField,
    StructType,
    TimestampType,
)

from .config import DataRangeConfig
from .logging_config import get_logger
from .utils import iter_months_inclusive, month_file_name

logger = get_logger(__name__)


# Column order of the 2015 yellow-taxi CSV files
TRIP_SCHEMA = StructType([
    StructField("VendorID", IntegerType(), True),
    StructField("tpep_pickup_datetime", TimestampType(), True),
    StructField("tpep_dropoff_datetime", TimestampType(), True),
    StructField("passenger_count", IntegerType(), True),
    StructField("trip_distance", DoubleType(), True),
    StructField("pickup_longitude", DoubleType(), True),
    StructField("pickup_latitude", DoubleType(), True),
    StructField("RateCodeID", IntegerType(), True),
    StructField("store_and_fwd_flag", StringType(), True),
    StructField("dropoff_longitude", DoubleType(), True),
    StructField("dropoff_latitude", DoubleType(), True),
    StructField("payment_type", IntegerType(), True),
    StructField("fare_amount", DoubleType(), True),
    StructField("extra", DoubleType(), True),
    StructField("mta_tax", DoubleType(), True),
    StructField("tip_amount", DoubleType(), True),
    StructField("tolls_amount", DoubleType(), True),
    StructField("improvement_surcharge", DoubleType(), True),
    StructField("total_amount", DoubleType(), True),
])

TIMESTAMP_FORMAT = "yyyy-MM-dd HH:mm:ss"


def monthly_paths(base_dir: str, data_range: DataRangeConfig) -> List[str]:
    """Input file paths for every month of the configured range."""
    months = iter_months_inclusive(
        data_range.year, data_range.start_month,
        data_range.year, data_range.end_month,
    )
    return [f"{base_dir}/{month_file_name(m, data_range.prefix)}" for m in months]


def check_path_exists(spark: SparkSession, path: str) -> bool:
    """
    Check if a path exists in the filesystem (local/HDFS/S3).

    Parameters
    ----------
    spark : SparkSession
        Active Spark session
    path : str
        Path to check

    Returns
    -------
    bool
        True if path exists
    """
    hadoop_conf = spark._jsc.hadoopConfiguration()
    hadoop_path = spark._jvm.org.apache.hadoop.fs.Path(path)
    fs = hadoop_path.getFileSystem(hadoop_conf)
    return fs.exists(hadoop_path)


def validate_paths_exist(
    spark: SparkSession,
    paths: List[str],
) -> Tuple[List[str], List[str]]:
    """
    Split input paths into those available and those missing.

    Returns
    -------
    Tuple[List[str], List[str]]
        (existing_paths, missing_paths)
    """
    existing = []
    missing = []
    for path in paths:
        if check_path_exists(spark, path):
            existing.append(path)
        else:
            missing.append(path)
    return existing, missing


def read_trip_csv(
    spark: SparkSession,
    paths: List[str],
    validate: bool = True,
    fail_on_missing: bool = True,
) -> DataFrame:
    """Read monthly trip CSV files against the fixed trip schema.

    Parameters
    ----------
    spark : SparkSession
        Active Spark session
    paths : List[str]
        CSV files to read
    validate : bool
        Whether to check paths exist before reading (default: True)
    fail_on_missing : bool
        If True, raise when a file is missing.
        If False, skip missing files and continue (default: True)

    Returns
    -------
    DataFrame
        All trips from the available files

    Raises
    ------
    FileNotFoundError
        If fail_on_missing=True and some files are missing, or if none is
        available at all
    """
    if validate:
        existing, missing = validate_paths_exist(spark, paths)
        if missing:
            if fail_on_missing:
                raise FileNotFoundError(
                    "Trip data not found:\n"
                    + "\n".join(f"  - {p}" for p in missing)
                    + f"\nAvailable files: {existing if existing else 'None'}"
                )
            logger.warning(f"Skipping missing files: {missing}")
            paths = existing

    if not paths:
        raise FileNotFoundError("No trip data available for any requested month.")

    logger.info(f"Reading trips from {len(paths)} file(s)")
    return (
        spark.read
        .option("header", "true")
        .option("timestampFormat", TIMESTAMP_FORMAT)
        .schema(TRIP_SCHEMA)
        .csv(paths)
    )


def write_enriched(df: DataFrame, path: str) -> None:
    logger.info(f"Writing enriched trips to {path}")
    df.write.mode("overwrite").parquet(path)
