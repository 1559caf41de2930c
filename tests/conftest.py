import os
import sys

import pytest


@pytest.fixture(scope="session")
def spark():
    """Local SparkSession; Spark tests are skipped when no JVM is available."""
    pytest.importorskip("pyspark")
    from taxi_periods.config import SparkConfig
    from taxi_periods.spark_session import create_spark_session

    os.environ.setdefault("PYSPARK_PYTHON", sys.executable)
    os.environ.setdefault("PYSPARK_DRIVER_PYTHON", sys.executable)
    try:
        session = create_spark_session(
            "taxi-periods-tests",
            SparkConfig(master="local[2]", shuffle_partitions=2),
        )
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"Spark unavailable: {exc}")
    session.sparkContext.setLogLevel("WARN")
    yield session
    session.stop()
