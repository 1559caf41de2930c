"""
Spark path tests: CSV reading, classification, enrichment and summaries.

They need a working local Spark (JVM); the ``spark`` fixture skips otherwise.
"""
import pytest

pytest.importorskip("pyspark")

from taxi_periods.spark_enrich import (  # noqa: E402
    REJECT_REASON_COL,
    classify_trips,
    enrich_trips,
    reject_counts,
)
from taxi_periods.spark_io import TRIP_SCHEMA, read_trip_csv, write_enriched  # noqa: E402
from taxi_periods.summaries import period_summary, top_tip_per_distance  # noqa: E402


ROWS = [
    # valid, 12 minutes inside 10:00-10:29
    "2,2015-01-15 10:00:00,2015-01-15 10:12:00,1,2.5,-73.9352,40.7306,1,N,-73.95,40.75,1,11.0,0.5,0.5,2.0,0.0,0.3,14.3",
    # voided
    "1,2015-01-15 11:00:00,2015-01-15 11:20:00,1,3.0,-73.9352,40.7306,1,N,-73.95,40.75,6,14.0,0.5,0.5,0.0,0.0,0.3,15.3",
    # 0.5 miles recorded for a ~4 mile hop
    "2,2015-01-15 00:29:00,2015-01-15 00:40:00,1,0.5,-73.9352,40.7306,1,N,-73.9712,40.7831,1,6.0,0.5,0.5,1.0,0.0,0.3,8.3",
    # round trip across midnight, mostly after 00:00
    "2,2015-01-15 23:55:00,2015-01-16 00:20:00,1,1.1,-73.9352,40.7306,1,N,-73.9352,40.7306,1,8.0,0.5,0.5,2.2,0.0,0.3,11.5",
    # fare missing
    "1,2015-01-15 13:00:00,2015-01-15 13:15:00,1,2.0,-73.9352,40.7306,1,N,-73.95,40.75,2,,0.5,0.5,0.0,0.0,0.3,13.3",
]


@pytest.fixture
def trips_csv(tmp_path):
    path = tmp_path / "yellow_tripdata_2015-01.csv"
    header = ",".join(field.name for field in TRIP_SCHEMA.fields)
    path.write_text("\n".join([header] + ROWS) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def raw_trips(spark, trips_csv):
    return read_trip_csv(spark, [trips_csv])


def test_read_trip_csv_applies_schema(raw_trips):
    assert raw_trips.schema == TRIP_SCHEMA
    assert raw_trips.count() == len(ROWS)


def test_read_trip_csv_missing_file_raises(spark, tmp_path):
    with pytest.raises(FileNotFoundError):
        read_trip_csv(spark, [str(tmp_path / "yellow_tripdata_2015-02.csv")])


def test_read_trip_csv_skips_missing_file(spark, trips_csv, tmp_path):
    df = read_trip_csv(
        spark,
        [trips_csv, str(tmp_path / "yellow_tripdata_2015-02.csv")],
        fail_on_missing=False,
    )
    assert df.count() == len(ROWS)


def test_classify_and_count_rejects(raw_trips):
    classified = classify_trips(raw_trips)
    assert REJECT_REASON_COL in classified.columns
    assert reject_counts(classified) == {
        "VoidedPayment": 1,
        "GeoDistanceMismatch": 1,
        "MissingRequiredField": 1,
    }


def test_enrich_trips_adds_derived_columns(raw_trips):
    enriched = enrich_trips(raw_trips)
    rows = {row["time_period"]: row for row in enriched.collect()}

    assert REJECT_REASON_COL not in enriched.columns
    assert set(rows) == {"10:00-10:29", "00:00-00:29"}

    morning = rows["10:00-10:29"]
    assert morning["journey_time_seconds"] == 720
    assert morning["speed_mph"] == 12.5
    assert morning["tip_per_distance"] == 0.8

    midnight = rows["00:00-00:29"]
    assert midnight["journey_time_seconds"] == 1500
    assert midnight["speed_mph"] == 2.64
    assert midnight["tip_per_distance"] == 2.0


NAN_ROWS = [
    # NaN dropoff latitude
    "2,2015-01-15 10:00:00,2015-01-15 10:12:00,1,2.5,-73.9352,40.7306,1,N,-73.95,NaN,1,11.0,0.5,0.5,2.0,0.0,0.3,14.3",
    # NaN tip
    "2,2015-01-15 11:00:00,2015-01-15 11:12:00,1,2.5,-73.9352,40.7306,1,N,-73.95,40.75,1,11.0,0.5,0.5,NaN,0.0,0.3,14.3",
    # NaN distance
    "2,2015-01-15 12:00:00,2015-01-15 12:12:00,1,NaN,-73.9352,40.7306,1,N,-73.95,40.75,1,11.0,0.5,0.5,2.0,0.0,0.3,14.3",
]


def test_nan_fields_are_rejected_as_missing(spark, tmp_path):
    path = tmp_path / "yellow_tripdata_2015-02.csv"
    header = ",".join(field.name for field in TRIP_SCHEMA.fields)
    path.write_text("\n".join([header] + NAN_ROWS) + "\n", encoding="utf-8")

    classified = classify_trips(read_trip_csv(spark, [str(path)]))

    assert reject_counts(classified) == {"MissingRequiredField": len(NAN_ROWS)}
    assert enrich_trips(classified).count() == 0


def test_summaries(raw_trips):
    enriched = enrich_trips(raw_trips)

    periods = period_summary(enriched).collect()
    assert [row["time_period"] for row in periods] == ["00:00-00:29", "10:00-10:29"]
    assert all(row["trip_count"] == 1 for row in periods)

    top = top_tip_per_distance(enriched, k=1).collect()
    assert len(top) == 1
    assert top[0]["tip_per_distance"] == 2.0


def test_top_tip_per_distance_rejects_non_positive_k(raw_trips):
    with pytest.raises(ValueError):
        top_tip_per_distance(enrich_trips(raw_trips), k=0)


def test_write_enriched_round_trips_row_count(spark, raw_trips, tmp_path):
    out = str(tmp_path / "enriched")
    write_enriched(enrich_trips(raw_trips), out)
    assert spark.read.parquet(out).count() == 2
