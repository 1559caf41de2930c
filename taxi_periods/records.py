"""
Trip record types shared by the validator, the period assigner and the
feature deriver.

Raw records mirror the 2015 NYC TLC yellow-taxi CSV layout. Any raw field
may be missing (``None``); the validator decides which absences matter.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional


# Record attribute -> TLC column name
COLUMN_NAMES = {
    "vendor_id": "VendorID",
    "pickup_datetime": "tpep_pickup_datetime",
    "dropoff_datetime": "tpep_dropoff_datetime",
    "passenger_count": "passenger_count",
    "trip_distance": "trip_distance",
    "pickup_longitude": "pickup_longitude",
    "pickup_latitude": "pickup_latitude",
    "rate_code": "RateCodeID",
    "store_and_fwd_flag": "store_and_fwd_flag",
    "dropoff_longitude": "dropoff_longitude",
    "dropoff_latitude": "dropoff_latitude",
    "payment_type": "payment_type",
    "fare_amount": "fare_amount",
    "extra": "extra",
    "mta_tax": "mta_tax",
    "tip_amount": "tip_amount",
    "tolls_amount": "tolls_amount",
    "improvement_surcharge": "improvement_surcharge",
    "total_amount": "total_amount",
}

DERIVED_COLUMNS = [
    "journey_time_seconds",
    "time_period",
    "speed_mph",
    "tip_per_distance",
]


class RejectReason(str, Enum):
    """Why a raw record was not admitted, one value per validation rule."""
    VOIDED_PAYMENT = "VoidedPayment"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    NON_POSITIVE_DURATION = "NonPositiveDuration"
    NON_POSITIVE_DISTANCE = "NonPositiveDistance"
    NON_POSITIVE_FARE = "NonPositiveFare"
    NEGATIVE_TIP = "NegativeTip"
    TOO_SHORT_DURATION = "TooShortDuration"
    TOO_SHORT_DISTANCE = "TooShortDistance"
    ZERO_COORDINATE = "ZeroCoordinate"
    GEO_DISTANCE_MISMATCH = "GeoDistanceMismatch"


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    # pandas hands NaN for missing floats and NaT for missing timestamps
    if isinstance(value, float):
        return math.isnan(value)
    try:
        return bool(value != value)
    except TypeError:
        # pandas.NA refuses truth-testing
        return True


def _to_datetime(value: Any) -> Optional[datetime]:
    if is_missing(value):
        return None
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    if hasattr(value, "to_pydatetime"):
        return value.to_pydatetime()
    return value


@dataclass(frozen=True)
class RawTripRecord:
    """One trip as read from the source, before any validation."""
    vendor_id: Optional[int] = None
    pickup_datetime: Optional[datetime] = None
    dropoff_datetime: Optional[datetime] = None
    passenger_count: Optional[int] = None
    trip_distance: Optional[float] = None
    pickup_longitude: Optional[float] = None
    pickup_latitude: Optional[float] = None
    rate_code: Optional[int] = None
    store_and_fwd_flag: Optional[str] = None
    dropoff_longitude: Optional[float] = None
    dropoff_latitude: Optional[float] = None
    payment_type: Optional[int] = None
    fare_amount: Optional[float] = None
    extra: Optional[float] = None
    mta_tax: Optional[float] = None
    tip_amount: Optional[float] = None
    tolls_amount: Optional[float] = None
    improvement_surcharge: Optional[float] = None
    total_amount: Optional[float] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "RawTripRecord":
        """Build a record from a row keyed by TLC column names.

        Absent keys, NaN and NaT all become ``None``. Timestamp strings are
        parsed as ISO 8601.
        """
        values = {}
        for attr, column in COLUMN_NAMES.items():
            value = row.get(column)
            if attr in ("pickup_datetime", "dropoff_datetime"):
                values[attr] = _to_datetime(value)
            else:
                values[attr] = None if is_missing(value) else value
        return cls(**values)

    def to_row(self) -> Dict[str, Any]:
        return {COLUMN_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ValidatedTripRecord:
    """A raw record that passed every admissibility rule."""
    trip: RawTripRecord
    journey_time_seconds: int


@dataclass(frozen=True)
class EnrichedTripRecord:
    """A validated record with its period label and derived metrics."""
    validated: ValidatedTripRecord
    time_period: str
    speed_mph: float
    tip_per_distance: float

    @property
    def trip(self) -> RawTripRecord:
        return self.validated.trip

    def to_row(self) -> Dict[str, Any]:
        row = self.trip.to_row()
        row["journey_time_seconds"] = self.validated.journey_time_seconds
        row["time_period"] = self.time_period
        row["speed_mph"] = self.speed_mph
        row["tip_per_distance"] = self.tip_per_distance
        return row


@dataclass(frozen=True)
class ValidationOutcome:
    """Admit/reject decision for one record.

    Exactly one of ``validated`` and ``reason`` is set.
    """
    validated: Optional[ValidatedTripRecord] = None
    reason: Optional[RejectReason] = None

    @property
    def admitted(self) -> bool:
        return self.reason is None
