"""In-memory record store backed by a :class:`pandas.DataFrame`.

Every row carries a unique, immutable ``id``. The frame is indexed by that id
so that single-field and batch updates address records directly. The store is
the only mutable state in a run; phases receive it explicitly.
"""

from __future__ import annotations

import datetime
import io
import json
import logging
from pathlib import Path
from typing import Hashable, Iterable, Mapping, Optional

import pandas as pd

from .exceptions import SchemaError, StoreUnavailableError

logger = logging.getLogger(__name__)

ID_COLUMN = "id"


class RecordStore:
    """A tabular collection of typed columns with a stable id per row."""

    def __init__(self, frame: pd.DataFrame, id_column: str = ID_COLUMN) -> None:
        if id_column not in frame.columns:
            raise SchemaError(f"Record store requires an id column named {id_column!r}")
        if frame[id_column].isna().any():
            raise SchemaError("Record ids must not be null")
        if frame[id_column].duplicated().any():
            dupes = frame.loc[frame[id_column].duplicated(), id_column].tolist()
            raise SchemaError(f"Record ids must be unique; duplicated: {dupes[:10]}")
        frame = frame.copy()
        if id_column != ID_COLUMN:
            frame = frame.rename(columns={id_column: ID_COLUMN})
        # unnamed index so "id" stays unambiguous as a column label
        frame.index = pd.Index(frame[ID_COLUMN].tolist())
        self._frame = frame

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, id_column: str = ID_COLUMN) -> "RecordStore":
        return cls(frame, id_column=id_column)

    @classmethod
    def from_file(
        cls,
        file_path: str | Path,
        column_map: Optional[Mapping[str, str]] = None,
    ) -> "RecordStore":
        """Load a CSV or JSON file into a store.

        Headers are renamed through ``column_map``. If the file has no id
        column, ids ``1..n`` are assigned in file order.
        """
        path = Path(file_path)
        if not path.exists():
            raise StoreUnavailableError(f"Input file not found: {file_path}")
        suffix = path.suffix.lower()
        try:
            if suffix == ".csv":
                df = pd.read_csv(path)
            elif suffix in {".json", ".ndjson"}:
                with open(path, "r", encoding="utf-8") as fh:
                    text = fh.read()
                if text.lstrip().startswith("["):
                    # a plain JSON array of records
                    df = pd.json_normalize(json.loads(text))
                else:
                    df = pd.read_json(io.StringIO(text), lines=True)
            else:
                raise StoreUnavailableError(
                    f"Unsupported file type: {suffix}; only CSV and JSON are supported"
                )
        except (OSError, ValueError) as exc:
            raise StoreUnavailableError(f"Could not read {file_path}: {exc}") from exc
        if column_map:
            df = df.rename(columns={k: v for k, v in column_map.items() if k in df.columns})
        if ID_COLUMN not in df.columns:
            logger.info("No %r column in %s; assigning sequential ids", ID_COLUMN, path.name)
            df.insert(0, ID_COLUMN, range(1, len(df) + 1))
        logger.info("Loaded %s with %d rows and %d columns", path.name, df.shape[0], df.shape[1])
        return cls(df)

    def write(self, output_path: str | Path) -> None:
        """Write the records to CSV or line-delimited JSON based on the extension."""
        out = Path(output_path)
        suffix = out.suffix.lower()
        if suffix not in {".csv", ".json"}:
            raise StoreUnavailableError(
                f"Unsupported output file type: {suffix}; only CSV and JSON are supported"
            )
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            if suffix == ".csv":
                self._frame.to_csv(out, index=False)
            else:
                _with_plain_dates(self._frame).to_json(
                    out, orient="records", lines=True, date_format="iso", default_handler=str
                )
        except OSError as exc:
            raise StoreUnavailableError(f"Could not write {output_path}: {exc}") from exc

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def columns(self) -> list:
        return list(self._frame.columns)

    @property
    def ids(self) -> list:
        return self._frame.index.tolist()

    def load_all(self) -> pd.DataFrame:
        """Return a copy of every record; callers cannot mutate the store through it."""
        return self._frame.copy()

    def get(self, record_id: Hashable, field: str):
        return self._frame.at[record_id, field]

    def add_column(self, name: str, dtype: str = "object") -> bool:
        """Add an empty column; returns ``False`` if the column already exists."""
        if name in self._frame.columns:
            return False
        self._frame[name] = pd.Series([None] * len(self._frame), index=self._frame.index, dtype=dtype)
        return True

    def drop_column(self, name: str) -> None:
        if name not in self._frame.columns:
            raise SchemaError(f"Cannot drop unknown column {name!r}")
        if name == ID_COLUMN:
            raise SchemaError("The id column cannot be dropped")
        self._frame = self._frame.drop(columns=[name])

    def _require(self, field: str) -> None:
        if field not in self._frame.columns:
            raise SchemaError(f"Unknown column {field!r}")

    def update_field(self, record_id: Hashable, field: str, value) -> None:
        self._require(field)
        if record_id not in self._frame.index:
            raise KeyError(record_id)
        self._frame.at[record_id, field] = value

    def update_many(self, field: str, values: Mapping[Hashable, object]) -> int:
        """Batch update ``field`` for the given ``{id: value}`` pairs."""
        self._require(field)
        if not values:
            return 0
        missing = [i for i in values if i not in self._frame.index]
        if missing:
            raise KeyError(missing[:10])
        column = self._frame[field].copy()
        if column.dtype != object:
            column = column.astype(object)
        for record_id, value in values.items():
            column.at[record_id] = value
        self._frame[field] = column
        return len(values)

    def delete(self, ids: Iterable[Hashable]) -> int:
        ids = set(ids)
        if not ids:
            return 0
        before = len(self._frame)
        self._frame = self._frame.drop(index=[i for i in self._frame.index if i in ids])
        return before - len(self._frame)

    def snapshot(self) -> pd.DataFrame:
        return self._frame.copy(deep=True)

    def restore(self, snapshot: pd.DataFrame) -> None:
        self._frame = snapshot.copy(deep=True)


def _as_day(value):
    # datetime is a date subclass but keeps its time of day
    if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
        return value.isoformat()
    return value


def _with_plain_dates(frame: pd.DataFrame) -> pd.DataFrame:
    """Copy of ``frame`` with ``datetime.date`` values written as ``YYYY-MM-DD``."""
    frame = frame.copy()
    for col in frame.columns:
        if frame[col].dtype == object:
            frame[col] = frame[col].map(_as_day)
    return frame
