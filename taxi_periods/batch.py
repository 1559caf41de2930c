"""
Single-process enrichment of trip record streams.

Records are independent, so this is a plain generator over the input;
callers wanting parallelism can split the input and merge the outputs.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Tuple

import pandas as pd

from .config import ValidationConfig
from .features import enrich
from .records import (
    COLUMN_NAMES,
    DERIVED_COLUMNS,
    EnrichedTripRecord,
    RawTripRecord,
)
from .validation import validate

ENRICHED_COLUMNS = list(COLUMN_NAMES.values()) + DERIVED_COLUMNS


@dataclass
class RejectTally:
    """Counts of rejected records keyed by reason, plus the admitted count."""
    reasons: Counter = field(default_factory=Counter)
    admitted: int = 0

    @property
    def rejected(self) -> int:
        return sum(self.reasons.values())

    @property
    def total(self) -> int:
        return self.admitted + self.rejected

    def as_dict(self) -> Dict[str, int]:
        return {reason.value: count for reason, count in self.reasons.items()}


def enrich_records(
    records: Iterable[RawTripRecord],
    cfg: Optional[ValidationConfig] = None,
    tally: Optional[RejectTally] = None,
) -> Iterator[EnrichedTripRecord]:
    """Yield enriched records for the admissible inputs, dropping the rest.

    Rejections are counted in ``tally`` when one is given.
    """
    for record in records:
        outcome = validate(record, cfg)
        if not outcome.admitted:
            if tally is not None:
                tally.reasons[outcome.reason] += 1
            continue
        if tally is not None:
            tally.admitted += 1
        yield enrich(outcome.validated, cfg)


def records_from_frame(pdf: pd.DataFrame) -> Iterator[RawTripRecord]:
    """Stream a DataFrame with TLC column names as raw records."""
    for row in pdf.to_dict(orient="records"):
        yield RawTripRecord.from_mapping(row)


def enriched_to_frame(records: Iterable[EnrichedTripRecord]) -> pd.DataFrame:
    return pd.DataFrame([r.to_row() for r in records], columns=ENRICHED_COLUMNS)


def enrich_frame(
    pdf: pd.DataFrame,
    cfg: Optional[ValidationConfig] = None,
) -> Tuple[pd.DataFrame, RejectTally]:
    """Validate and enrich a pandas DataFrame of raw trips.

    Parameters
    ----------
    pdf : pandas.DataFrame
        Raw trips keyed by TLC column names. Missing columns read as null.
    cfg : ValidationConfig, optional
        Validation thresholds.

    Returns
    -------
    Tuple[pandas.DataFrame, RejectTally]
        Enriched admitted trips and the rejection counts.
    """
    tally = RejectTally()
    enriched = enriched_to_frame(enrich_records(records_from_frame(pdf), cfg, tally))
    return enriched, tally
