"""Pipeline orchestration for the housing cleaner.

This module defines the :class:`HousingCleaner` class which runs the cleaning
passes over a :class:`~housing_cleaner.store.RecordStore` in a fixed order:

1. **Derived columns**: every derived column is added before any pass
   writes to it.

2. **Temporal standardisation**: ``sale_date`` is derived from
   ``sale_date_raw`` with the time of day removed.

3. **Address backfill**: records without a property address take the
   address of a sibling sharing their ``parcel_id``.

4. **Address parsing**: property and owner addresses are split into street,
   city and (for owners) state.

5. **Categorical normalisation**: ``sold_as_vacant`` receives the canonical
   ``"Yes"``/``"No"`` for ``"Y"``/``"N"``; other values pass through.

6. **Duplicate removal**: only the lowest-id record of every duplicate set
   survives. The identity key uses the derived ``sale_date``.

7. **Schema cleanup**: the superseded ``sale_date_raw`` column is dropped.

Each pass is a barrier: it scans the whole store before the next one starts.
A pass that fails leaves the store as the previous pass left it. Data
problems do not stop a run; they are listed as anomalies in the returned
:class:`~housing_cleaner.report.PipelineReport`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .backfill import backfill_property_addresses
from .config import CleanerConfig
from .duplicates import IDENTITY_KEY, remove_duplicates
from .exceptions import MalformedInputError, StoreUnavailableError
from .normalizers import is_null, normalize_sold_as_vacant, standardize_sale_date
from .parsers import split_owner_address, split_property_address
from .report import MALFORMED_INPUT, PhaseReport, PipelineReport
from .schema import (
    DERIVED_COLUMNS,
    SUPERSEDED_COLUMNS,
    Step,
    add_derived_columns,
    drop_columns,
    validate_schedule,
)
from .store import RecordStore

logger = logging.getLogger(__name__)

PROPERTY_PARTS = ("property_street", "property_city")
OWNER_PARTS = ("owner_street", "owner_city", "owner_state")


def _differs(old, new) -> bool:
    if is_null(old) and is_null(new):
        return False
    if is_null(old) or is_null(new):
        return True
    return old != new


def _apply(store: RecordStore, field: str, current: Dict, computed: Dict) -> set:
    """Write only the values that changed; return the ids that were touched."""
    changed = {i: v for i, v in computed.items() if _differs(current.get(i), v)}
    store.update_many(field, changed)
    return set(changed)


def standardize_sale_dates(store: RecordStore) -> PhaseReport:
    """Derive ``sale_date`` from ``sale_date_raw`` for every record."""
    report = PhaseReport(name="sale_date")
    df = store.load_all()
    report.examined = len(df)
    computed = {}
    for record_id, raw in df["sale_date_raw"].items():
        try:
            computed[record_id] = standardize_sale_date(raw)
        except MalformedInputError as exc:
            computed[record_id] = None
            report.add_anomaly(MALFORMED_INPUT, record_id, "sale_date_raw", raw, str(exc))
    report.mutated = len(_apply(store, "sale_date", df["sale_date"].to_dict(), computed))
    return report


def split_addresses(store: RecordStore) -> PhaseReport:
    """Populate the address component columns from the raw address strings."""
    report = PhaseReport(name="address_parsing")
    df = store.load_all()
    report.examined = len(df)

    targets: List[Tuple[str, Tuple[str, ...], object]] = [
        ("property_address_raw", PROPERTY_PARTS, split_property_address),
        ("owner_address_raw", OWNER_PARTS, split_owner_address),
    ]
    touched = set()
    for source, parts, splitter in targets:
        computed: Dict[str, Dict] = {part: {} for part in parts}
        for record_id, raw in df[source].items():
            try:
                pieces = splitter(raw)
            except MalformedInputError as exc:
                pieces = None
                report.add_anomaly(MALFORMED_INPUT, record_id, source, raw, str(exc))
            if pieces is None:
                pieces = (None,) * len(parts)
            for part, piece in zip(parts, pieces):
                computed[part][record_id] = piece
        for part in parts:
            touched |= _apply(store, part, df[part].to_dict(), computed[part])
    report.mutated = len(touched)
    return report


def _value_counts(series: pd.Series) -> Dict[str, int]:
    return {str(k): int(v) for k, v in series.value_counts(dropna=True).items()}


def normalize_categoricals(store: RecordStore) -> PhaseReport:
    """Derive the canonical ``sold_as_vacant`` value for every record."""
    report = PhaseReport(name="categorical")
    df = store.load_all()
    report.examined = len(df)
    computed = {i: normalize_sold_as_vacant(raw) for i, raw in df["sold_as_vacant_raw"].items()}
    report.mutated = len(_apply(store, "sold_as_vacant", df["sold_as_vacant"].to_dict(), computed))
    canonical = pd.Series(computed, dtype=object)
    report.details["raw_counts"] = _value_counts(df["sold_as_vacant_raw"])
    report.details["canonical_counts"] = _value_counts(canonical)
    report.details["null_count"] = int(canonical.map(is_null).sum())
    return report


class HousingCleaner:
    """Runs the cleaning passes over a record store.

    Parameters
    ----------
    config : Optional[CleanerConfig], optional
        Run options. Defaults to :class:`CleanerConfig` with its defaults.
    """

    def __init__(self, config: Optional[CleanerConfig] = None) -> None:
        self.config = config or CleanerConfig()

    def build_steps(self) -> List[Step]:
        """Return the ordered steps for one run."""
        steps = [
            Step(
                "add_columns",
                add_derived_columns,
                adds=tuple(DERIVED_COLUMNS),
            ),
            Step(
                "sale_date",
                standardize_sale_dates,
                requires=("sale_date_raw",),
                writes=("sale_date",),
            ),
            Step(
                "address_backfill",
                backfill_property_addresses,
                requires=("parcel_id", "property_address_raw"),
                writes=("property_address_raw",),
            ),
            Step(
                "address_parsing",
                split_addresses,
                requires=("property_address_raw", "owner_address_raw"),
                writes=PROPERTY_PARTS + OWNER_PARTS,
            ),
            Step(
                "categorical",
                normalize_categoricals,
                requires=("sold_as_vacant_raw",),
                writes=("sold_as_vacant",),
            ),
            Step(
                "duplicate_removal",
                remove_duplicates,
                requires=IDENTITY_KEY,
            ),
        ]
        if self.config.drop_raw_date:
            steps.append(
                Step(
                    "drop_columns",
                    lambda store: drop_columns(store, SUPERSEDED_COLUMNS),
                    drops=SUPERSEDED_COLUMNS,
                )
            )
        return steps

    def run(self, store: RecordStore, steps: Optional[Sequence[Step]] = None) -> PipelineReport:
        """Run every step over ``store`` and return the per-phase report.

        The schedule is validated against the store's columns first, so a
        :class:`~housing_cleaner.exceptions.SchemaError` is raised before any
        record is modified.
        """
        steps = list(steps) if steps is not None else self.build_steps()
        validate_schedule(steps, store.columns)

        report = PipelineReport(rows_before=len(store), columns_before=store.columns)
        for step in steps:
            phase = self._run_step(step, store)
            report.phases.append(phase)
            logger.info(
                "%s: examined=%d mutated=%d removed=%d anomalies=%d",
                phase.name,
                phase.examined,
                phase.mutated,
                phase.removed,
                len(phase.anomalies),
            )
            if phase.anomalies:
                logger.warning("%s reported %d anomalies", phase.name, len(phase.anomalies))
                for anomaly in phase.anomalies:
                    logger.debug(
                        "%s: record %s field %s: %s",
                        anomaly.kind,
                        anomaly.record_id,
                        anomaly.field,
                        anomaly.message,
                    )
        report.rows_after = len(store)
        report.columns_after = store.columns
        return report

    def _run_step(self, step: Step, store: RecordStore) -> PhaseReport:
        attempt = 0
        while True:
            snapshot = store.snapshot()
            try:
                return step.run(store)
            except StoreUnavailableError:
                store.restore(snapshot)
                if attempt >= self.config.phase_retries:
                    raise
                attempt += 1
                logger.warning("Store unavailable during %s; retrying (%d/%d)",
                               step.name, attempt, self.config.phase_retries)
            except Exception:
                store.restore(snapshot)
                raise

    def clean_file(
        self,
        file_path: str | Path,
        output_path: Optional[str | Path] = None,
    ) -> Tuple[pd.DataFrame, PipelineReport]:
        """Load, clean and optionally save a dataset.

        Returns
        -------
        tuple
            ``(df, report)`` where ``df`` holds the cleaned records.
        """
        store = RecordStore.from_file(file_path, column_map=self.config.column_map)
        report = self.run(store)
        if output_path:
            store.write(output_path)
            logger.info("Wrote %d records to %s", len(store), output_path)
        return store.load_all(), report


def run_pipeline(store: RecordStore, config: Optional[CleanerConfig] = None) -> PipelineReport:
    """Run the full cleaning pipeline over ``store`` in place."""
    return HousingCleaner(config).run(store)
