"""Structured reports returned by a pipeline run."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

MALFORMED_INPUT = "malformed_input"
ORPHAN_BACKFILL = "orphan_backfill"


@dataclass
class Anomaly:
    """A non-fatal data-quality finding about a single record."""

    kind: str
    record_id: Any
    field: str
    value: Any = None
    message: str = ""


@dataclass
class PhaseReport:
    """Outcome of one pipeline step.

    Parameters
    ----------
    name : str
        Step name, e.g. ``"address_backfill"``.
    examined : int
        Records scanned by the step.
    mutated : int
        Records with at least one field changed.
    removed : int
        Records deleted from the store.
    anomalies : List[Anomaly]
        Non-fatal data-quality findings.
    details : Dict[str, Any]
        Step-specific audit data such as value counts.
    """

    name: str
    examined: int = 0
    mutated: int = 0
    removed: int = 0
    anomalies: List[Anomaly] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def add_anomaly(self, kind: str, record_id, field_name: str, value=None, message: str = "") -> None:
        self.anomalies.append(Anomaly(kind, record_id, field_name, value, message))


@dataclass
class PipelineReport:
    """Per-phase outcome of a whole run.

    Parameters
    ----------
    rows_before, rows_after : int
        Record counts at the start and end of the run.
    columns_before, columns_after : List[str]
        Store columns at the start and end of the run.
    phases : List[PhaseReport]
        One entry per executed step, in execution order.
    """

    rows_before: int = 0
    rows_after: int = 0
    columns_before: List[str] = field(default_factory=list)
    columns_after: List[str] = field(default_factory=list)
    phases: List[PhaseReport] = field(default_factory=list)

    def phase(self, name: str) -> Optional[PhaseReport]:
        for phase in self.phases:
            if phase.name == name:
                return phase
        return None

    @property
    def anomaly_count(self) -> int:
        return sum(len(p.anomalies) for p in self.phases)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the report."""
        data = asdict(self)
        for phase in data["phases"]:
            for anomaly in phase["anomalies"]:
                anomaly["record_id"] = _jsonable(anomaly["record_id"])
                anomaly["value"] = _jsonable(anomaly["value"])
        data["anomaly_count"] = self.anomaly_count
        return data


def _jsonable(value):
    # numpy scalars and dates are not accepted by json.dumps
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if hasattr(value, "item"):
        return value.item()
    return str(value)
