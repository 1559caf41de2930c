"""
Half-hour period assignment.

The day is tiled by fixed buckets starting at 00:00 (48 of them at the
default 30 minute width). A trip is assigned to exactly one bucket:

- inside a single bucket: that bucket;
- straddling one boundary: the bucket holding the larger share of the
  trip, the earlier one on a tie;
- crossing more boundaries: the bucket containing the trip's midpoint.

Labels read ``"HH:MM-HH:MM"`` with the end at the last whole minute of the
bucket (``00:00-00:29``), not at the exclusive boundary.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

DEFAULT_BUCKET_MINUTES = 30


def bucket_start(ts: datetime, bucket_minutes: int = DEFAULT_BUCKET_MINUTES) -> datetime:
    """Start of the bucket containing ``ts``; seconds and below are dropped."""
    minute_of_day = ts.hour * 60 + ts.minute
    midnight = ts.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(minutes=(minute_of_day // bucket_minutes) * bucket_minutes)


def spanned_buckets(
    pickup: datetime,
    dropoff: datetime,
    bucket_minutes: int = DEFAULT_BUCKET_MINUTES,
) -> int:
    """Number of consecutive buckets from pickup's through dropoff's, inclusive."""
    width = timedelta(minutes=bucket_minutes)
    first = bucket_start(pickup, bucket_minutes)
    last = bucket_start(dropoff, bucket_minutes)
    return (last + width - first) // width


def assign(
    pickup: datetime,
    dropoff: datetime,
    bucket_minutes: int = DEFAULT_BUCKET_MINUTES,
) -> datetime:
    """Return the start of the bucket a trip belongs to.

    Raises
    ------
    ValueError
        If dropoff is not strictly after pickup. Admitted records never hit
        this.
    """
    if dropoff <= pickup:
        raise ValueError(
            f"dropoff {dropoff} must be after pickup {pickup} to assign a period"
        )

    width = timedelta(minutes=bucket_minutes)
    first = bucket_start(pickup, bucket_minutes)
    last = bucket_start(dropoff, bucket_minutes)
    spanned = spanned_buckets(pickup, dropoff, bucket_minutes)

    if spanned == 1:
        return first
    if spanned == 2:
        in_first = width - (pickup - first)
        in_last = dropoff - last
        return last if in_last > in_first else first
    midpoint = pickup + (dropoff - pickup) / 2
    return bucket_start(midpoint, bucket_minutes)


def period_label(start: datetime, bucket_minutes: int = DEFAULT_BUCKET_MINUTES) -> str:
    end = start + timedelta(minutes=bucket_minutes - 1)
    return f"{start:%H:%M}-{end:%H:%M}"


def assign_period(
    pickup: datetime,
    dropoff: datetime,
    bucket_minutes: int = DEFAULT_BUCKET_MINUTES,
) -> str:
    """Label of the period a trip belongs to, e.g. ``"01:00-01:29"``."""
    return period_label(assign(pickup, dropoff, bucket_minutes), bucket_minutes)


def all_period_labels(bucket_minutes: int = DEFAULT_BUCKET_MINUTES) -> List[str]:
    """Every label of the day in order, ``00:00-00:29`` first."""
    midnight = datetime(2000, 1, 1)
    count = (24 * 60) // bucket_minutes
    return [
        period_label(midnight + timedelta(minutes=i * bucket_minutes), bucket_minutes)
        for i in range(count)
    ]
