"""NYC taxi trip validation and half-hour period enrichment."""

from .features import DerivedFeatures, derive, enrich
from .geo import distance
from .periods import all_period_labels, assign, assign_period, bucket_start
from .records import (
    EnrichedTripRecord,
    RawTripRecord,
    RejectReason,
    ValidatedTripRecord,
    ValidationOutcome,
)
from .validation import reject_reason, validate

__all__ = [
    "DerivedFeatures",
    "EnrichedTripRecord",
    "RawTripRecord",
    "RejectReason",
    "ValidatedTripRecord",
    "ValidationOutcome",
    "all_period_labels",
    "assign",
    "assign_period",
    "bucket_start",
    "derive",
    "distance",
    "enrich",
    "reject_reason",
    "validate",
]
