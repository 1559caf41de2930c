"""
Record admissibility checks.

Each raw trip is run through an ordered list of rules. The first rule that
fails names the rejection reason; a record passing all of them becomes a
ValidatedTripRecord carrying its journey time in seconds.

Required fields are the timestamps, trip distance, the four coordinates,
fare amount and tip amount. A null or NaN tip is therefore reported as
MissingRequiredField, never NegativeTip. NaN counts as missing for every
required field.

Rejection is a classification, not an error: nothing here raises for a bad
record.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .config import DEFAULT_VALIDATION, ValidationConfig
from .geo import distance
from .records import (
    RawTripRecord,
    RejectReason,
    ValidatedTripRecord,
    ValidationOutcome,
    is_missing,
)


REQUIRED_FIELDS = [
    "pickup_datetime",
    "dropoff_datetime",
    "trip_distance",
    "pickup_latitude",
    "pickup_longitude",
    "dropoff_latitude",
    "dropoff_longitude",
    "fare_amount",
    # needed for tip_per_distance
    "tip_amount",
]

COORDINATE_FIELDS = [
    "pickup_latitude",
    "pickup_longitude",
    "dropoff_latitude",
    "dropoff_longitude",
]

Rule = Callable[[RawTripRecord, ValidationConfig], bool]


def journey_seconds(trip: RawTripRecord) -> int:
    """Whole seconds between pickup and dropoff, truncated."""
    return int((trip.dropoff_datetime - trip.pickup_datetime).total_seconds())


def _is_voided(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return trip.payment_type == cfg.voided_payment_type


def _has_missing_field(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return any(is_missing(getattr(trip, name)) for name in REQUIRED_FIELDS)


def _dropoff_not_after_pickup(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return trip.dropoff_datetime <= trip.pickup_datetime


def _non_positive_distance(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return trip.trip_distance <= 0


def _non_positive_fare(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return trip.fare_amount <= 0


def _negative_tip(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return trip.tip_amount < 0


def _too_short_duration(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return journey_seconds(trip) < cfg.min_journey_seconds


def _too_short_distance(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return trip.trip_distance < cfg.min_trip_distance


def _has_zero_coordinate(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    return any(getattr(trip, name) == 0 for name in COORDINATE_FIELDS)


def is_round_trip(trip: RawTripRecord) -> bool:
    """Pickup and dropoff share the exact same coordinates."""
    return (
        trip.pickup_latitude == trip.dropoff_latitude
        and trip.pickup_longitude == trip.dropoff_longitude
    )


def _geo_mismatch(trip: RawTripRecord, cfg: ValidationConfig) -> bool:
    if is_round_trip(trip):
        return False
    straight_line = distance(
        trip.pickup_latitude,
        trip.pickup_longitude,
        trip.dropoff_latitude,
        trip.dropoff_longitude,
        radius=cfg.earth_radius_miles,
    )
    return trip.trip_distance < straight_line


# Order matters only for which reason gets reported; every later rule may
# assume the required fields are present.
RULES: List[Tuple[RejectReason, Rule]] = [
    (RejectReason.VOIDED_PAYMENT, _is_voided),
    (RejectReason.MISSING_REQUIRED_FIELD, _has_missing_field),
    (RejectReason.NON_POSITIVE_DURATION, _dropoff_not_after_pickup),
    (RejectReason.NON_POSITIVE_DISTANCE, _non_positive_distance),
    (RejectReason.NON_POSITIVE_FARE, _non_positive_fare),
    (RejectReason.NEGATIVE_TIP, _negative_tip),
    (RejectReason.TOO_SHORT_DURATION, _too_short_duration),
    (RejectReason.TOO_SHORT_DISTANCE, _too_short_distance),
    (RejectReason.ZERO_COORDINATE, _has_zero_coordinate),
    (RejectReason.GEO_DISTANCE_MISMATCH, _geo_mismatch),
]


def reject_reason(
    trip: RawTripRecord,
    cfg: Optional[ValidationConfig] = None,
) -> Optional[RejectReason]:
    """Return the first failing rule's reason, or None when admissible."""
    cfg = cfg or DEFAULT_VALIDATION
    for reason, fails in RULES:
        if fails(trip, cfg):
            return reason
    return None


def validate(
    trip: RawTripRecord,
    cfg: Optional[ValidationConfig] = None,
) -> ValidationOutcome:
    """Classify one raw record.

    Parameters
    ----------
    trip : RawTripRecord
        Record to check.
    cfg : ValidationConfig, optional
        Thresholds; the defaults match the TLC cleaning rules.

    Returns
    -------
    ValidationOutcome
        ``validated`` set on admission, ``reason`` set on rejection.
    """
    reason = reject_reason(trip, cfg)
    if reason is not None:
        return ValidationOutcome(reason=reason)
    return ValidationOutcome(
        validated=ValidatedTripRecord(
            trip=trip,
            journey_time_seconds=journey_seconds(trip),
        )
    )
