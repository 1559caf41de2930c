import math

import pandas as pd

from taxi_periods.batch import (
    ENRICHED_COLUMNS,
    RejectTally,
    enrich_frame,
    enrich_records,
    records_from_frame,
)
from taxi_periods.records import RawTripRecord, RejectReason


def _create_raw_df() -> pd.DataFrame:
    """Four trips: one valid, one voided, one zero-length, one without fare."""
    return pd.DataFrame({
        "VendorID": [2, 1, 2, 1],
        "tpep_pickup_datetime": pd.to_datetime([
            "2015-01-15 10:00:00",
            "2015-01-15 11:00:00",
            "2015-01-15 12:00:00",
            "2015-01-15 13:00:00",
        ]),
        "tpep_dropoff_datetime": pd.to_datetime([
            "2015-01-15 10:12:00",
            "2015-01-15 11:20:00",
            "2015-01-15 12:00:00",
            "2015-01-15 13:15:00",
        ]),
        "passenger_count": [1, 2, 1, 1],
        "trip_distance": [2.5, 3.0, 1.0, 2.0],
        "pickup_longitude": [-73.9352, -73.9352, -73.9352, -73.9352],
        "pickup_latitude": [40.7306, 40.7306, 40.7306, 40.7306],
        "RateCodeID": [1, 1, 1, 1],
        "store_and_fwd_flag": ["N", "N", "N", "N"],
        "dropoff_longitude": [-73.9500, -73.9500, -73.9500, -73.9500],
        "dropoff_latitude": [40.7500, 40.7500, 40.7500, 40.7500],
        "payment_type": [1, 6, 1, 2],
        "fare_amount": [11.0, 14.0, 5.0, float("nan")],
        "extra": [0.5, 0.5, 0.5, 0.5],
        "mta_tax": [0.5, 0.5, 0.5, 0.5],
        "tip_amount": [2.0, 0.0, 0.0, 0.0],
        "tolls_amount": [0.0, 0.0, 0.0, 0.0],
        "improvement_surcharge": [0.3, 0.3, 0.3, 0.3],
        "total_amount": [14.3, 15.3, 6.3, 13.3],
    })


def test_enrich_frame_keeps_only_admitted_trips():
    enriched, tally = enrich_frame(_create_raw_df())

    assert list(enriched.columns) == ENRICHED_COLUMNS
    assert len(enriched) == 1

    row = enriched.iloc[0]
    assert row["journey_time_seconds"] == 720
    assert row["time_period"] == "10:00-10:29"
    assert row["speed_mph"] == 12.5
    assert row["tip_per_distance"] == 0.8


def test_enrich_frame_counts_rejects_by_reason():
    _, tally = enrich_frame(_create_raw_df())

    assert tally.admitted == 1
    assert tally.rejected == 3
    assert tally.total == 4
    assert tally.as_dict() == {
        "VoidedPayment": 1,
        "NonPositiveDuration": 1,
        "MissingRequiredField": 1,
    }


def test_enrich_frame_empty_input():
    enriched, tally = enrich_frame(_create_raw_df().iloc[0:0])
    assert enriched.empty
    assert list(enriched.columns) == ENRICHED_COLUMNS
    assert tally.total == 0


def test_records_from_frame_normalises_missing_values():
    records = list(records_from_frame(_create_raw_df()))

    assert len(records) == 4
    assert records[3].fare_amount is None
    assert records[0].fare_amount == 11.0
    assert records[0].pickup_datetime.minute == 0


def test_records_from_frame_missing_column_reads_as_null():
    df = _create_raw_df().drop(columns=["tip_amount"])
    records = list(records_from_frame(df))
    assert all(r.tip_amount is None for r in records)


def test_missing_timestamp_becomes_none():
    df = _create_raw_df()
    df.loc[0, "tpep_dropoff_datetime"] = pd.NaT
    record = next(records_from_frame(df))
    assert record.dropoff_datetime is None


def test_enrich_records_without_tally():
    trips = list(records_from_frame(_create_raw_df()))
    enriched = list(enrich_records(trips))
    assert len(enriched) == 1
    assert enriched[0].trip == trips[0]


def test_enrich_records_is_lazy():
    tally = RejectTally()
    stream = enrich_records(iter([RawTripRecord()]), tally=tally)
    assert tally.total == 0
    assert list(stream) == []
    assert tally.reasons[RejectReason.MISSING_REQUIRED_FIELD] == 1


def test_from_mapping_parses_iso_strings():
    record = RawTripRecord.from_mapping({
        "tpep_pickup_datetime": "2015-01-15 10:00:00",
        "fare_amount": math.nan,
    })
    assert record.pickup_datetime.hour == 10
    assert record.fare_amount is None
    assert record.vendor_id is None
