from typing import Optional

from pyspark.sql import SparkSession

from .config import SparkConfig


def create_spark_session(app_name: str, cfg: Optional[SparkConfig] = None) -> SparkSession:
    """

    Parameters
    ----------
    app_name: str :

    cfg: SparkConfig :
         (Default value = None)

    Returns
    -------

    """
    cfg = cfg or SparkConfig()
    return (
        SparkSession.builder
        .appName(app_name)
        .master(cfg.master)
        .config("spark.sql.shuffle.partitions", str(cfg.shuffle_partitions))

        # Trip timestamps are wall-clock NYC times without zone
        .config("spark.sql.session.timeZone", "UTC")

        .getOrCreate()
    )
