"""Remove duplicate transactions.

Records are partitioned by the composite identity key and ranked by id inside
each partition. Ranks are computed for the whole table before anything is
deleted; every record ranked after the first is removed. Null key values
compare equal to each other, so two records that both lack an address still
fall into the same partition.
"""

from __future__ import annotations

import logging
from typing import Tuple

import pandas as pd

from .report import PhaseReport
from .store import ID_COLUMN, RecordStore

logger = logging.getLogger(__name__)

IDENTITY_KEY: Tuple[str, ...] = (
    "parcel_id",
    "property_address_raw",
    "sale_price",
    "sale_date",
    "legal_reference",
)


def rank_within_partitions(df: pd.DataFrame, key=IDENTITY_KEY) -> pd.Series:
    """Return the 1-based rank of each record inside its identity partition."""
    ordered = df.sort_values(ID_COLUMN, kind="mergesort")
    # dropna=False keeps null key values together in one partition
    ranks = ordered.groupby(list(key), dropna=False, sort=False).cumcount() + 1
    return ranks.reindex(df.index)


def remove_duplicates(store: RecordStore, key=IDENTITY_KEY) -> PhaseReport:
    """Keep the lowest-id record of each duplicate set and delete the rest."""
    report = PhaseReport(name="duplicate_removal")
    df = store.load_all()
    report.examined = len(df)

    ranks = rank_within_partitions(df, key)
    doomed = ranks.index[ranks > 1].tolist()
    report.details["duplicate_sets"] = int((ranks == 2).sum())
    report.removed = store.delete(doomed)
    if doomed:
        logger.info("Removed %d duplicate records", report.removed)
    return report
