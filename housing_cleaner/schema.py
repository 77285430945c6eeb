"""Schema evolution: derived column declarations and step ordering checks.

Derived columns are added before any pass writes to them and raw columns are
only dropped once nothing scheduled later needs them. :func:`validate_schedule`
checks a whole run up front so an ordering mistake aborts before any record
is touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

from .exceptions import SchemaError, SchemaOrderingViolation
from .report import PhaseReport
from .store import ID_COLUMN, RecordStore

logger = logging.getLogger(__name__)

DERIVED_COLUMNS: Dict[str, str] = {
    "sale_date": "object",
    "property_street": "object",
    "property_city": "object",
    "owner_street": "object",
    "owner_city": "object",
    "owner_state": "object",
    "sold_as_vacant": "object",
}

SUPERSEDED_COLUMNS: Tuple[str, ...] = ("sale_date_raw",)


@dataclass(frozen=True)
class Step:
    """One scheduled pipeline step and the columns it touches."""

    name: str
    run: Callable[[RecordStore], PhaseReport]
    requires: Tuple[str, ...] = ()
    writes: Tuple[str, ...] = ()
    adds: Tuple[str, ...] = ()
    drops: Tuple[str, ...] = ()


def validate_schedule(steps: Sequence[Step], available_columns: Iterable[str]) -> None:
    """Check that every step only touches columns that exist at its position.

    Raises
    ------
    SchemaError
        A required raw column is not present in the store at all.
    SchemaOrderingViolation
        A step uses a column dropped by an earlier step, or writes a column
        that has not been added yet.
    """
    initial = set(available_columns)
    present = set(initial)
    dropped: Dict[str, str] = {}
    added_later = {col for step in steps for col in step.adds}

    for step in steps:
        for col in step.requires + step.writes:
            if col in dropped:
                raise SchemaOrderingViolation(
                    f"Step {step.name!r} uses column {col!r} dropped by step {dropped[col]!r}"
                )
        for col in step.requires:
            if col not in present:
                if col in added_later:
                    raise SchemaOrderingViolation(
                        f"Step {step.name!r} requires column {col!r} before it is added"
                    )
                raise SchemaError(f"Step {step.name!r} requires missing column {col!r}")
        for col in step.writes:
            if col not in present:
                raise SchemaOrderingViolation(
                    f"Step {step.name!r} writes column {col!r} before it is added"
                )
        present.update(step.adds)
        for col in step.drops:
            if col == ID_COLUMN:
                raise SchemaOrderingViolation("The id column cannot be dropped")
            if col not in present:
                raise SchemaError(f"Step {step.name!r} drops unknown column {col!r}")
            present.discard(col)
            dropped[col] = step.name


def add_derived_columns(store: RecordStore, columns: Optional[Dict[str, str]] = None) -> PhaseReport:
    """Add every declared derived column that the store does not have yet."""
    columns = DERIVED_COLUMNS if columns is None else columns
    report = PhaseReport(name="add_columns", examined=len(store))
    added = [name for name, dtype in columns.items() if store.add_column(name, dtype)]
    report.details["added"] = added
    if added:
        logger.info("Added derived columns: %s", ", ".join(added))
    return report


def drop_columns(store: RecordStore, names: Iterable[str]) -> PhaseReport:
    report = PhaseReport(name="drop_columns", examined=len(store))
    names = list(names)
    for name in names:
        store.drop_column(name)
    report.details["dropped"] = names
    if names:
        logger.info("Dropped superseded columns: %s", ", ".join(names))
    return report
