"""Derived per-trip metrics for validated records."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_VALIDATION, ValidationConfig
from .periods import assign_period
from .records import EnrichedTripRecord, ValidatedTripRecord


@dataclass(frozen=True)
class DerivedFeatures:
    """Speed and tip ratio of one trip."""
    speed_mph: float
    tip_per_distance: float


def speed_mph(trip_distance: float, journey_time_seconds: int) -> float:
    return round(trip_distance * 3600.0 / journey_time_seconds, 2)


def tip_per_distance(tip_amount: float, trip_distance: float) -> float:
    return round(tip_amount / trip_distance, 2)


def derive(record: ValidatedTripRecord) -> DerivedFeatures:
    """Compute speed (mph) and tip per mile, both rounded to 2 decimals.

    Validation guarantees a journey of at least 300s and a distance of at
    least 0.1 mile, so neither division can hit zero.
    """
    trip = record.trip
    return DerivedFeatures(
        speed_mph=speed_mph(trip.trip_distance, record.journey_time_seconds),
        tip_per_distance=tip_per_distance(trip.tip_amount, trip.trip_distance),
    )


def enrich(
    record: ValidatedTripRecord,
    cfg: Optional[ValidationConfig] = None,
) -> EnrichedTripRecord:
    """Attach the period label and derived metrics to a validated record."""
    cfg = cfg or DEFAULT_VALIDATION
    derived = derive(record)
    return EnrichedTripRecord(
        validated=record,
        time_period=assign_period(
            record.trip.pickup_datetime,
            record.trip.dropoff_datetime,
            cfg.bucket_minutes,
        ),
        speed_mph=derived.speed_mph,
        tip_per_distance=derived.tip_per_distance,
    )
