"""Configuration for the housing cleaner.

The source dataset uses the Nashville housing export headers; they are mapped
onto the snake_case field names the pipeline works with. A JSON column map
can extend or override the default mapping (see :func:`load_column_map`).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

NASHVILLE_COLUMN_MAP: Dict[str, str] = {
    "UniqueID ": "id",
    "UniqueID": "id",
    "ParcelID": "parcel_id",
    "PropertyAddress": "property_address_raw",
    "SaleDate": "sale_date_raw",
    "SalePrice": "sale_price",
    "LegalReference": "legal_reference",
    "SoldAsVacant": "sold_as_vacant_raw",
    "OwnerAddress": "owner_address_raw",
}


def load_column_map(path: str | Path) -> Dict[str, str]:
    """Load a JSON column map and merge it over :data:`NASHVILLE_COLUMN_MAP`.

    The file should contain either a mapping of source header to field name
    or a dictionary with a ``"columns"`` key holding such a mapping.
    """
    with open(Path(path), "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict) and isinstance(data.get("columns"), dict):
        data = data["columns"]
    if not isinstance(data, dict):
        raise ValueError("Column map must be a dict or a dict with a 'columns' key")
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
        raise ValueError("Column map keys and values must be strings")
    merged = dict(NASHVILLE_COLUMN_MAP)
    merged.update(data)
    return merged


@dataclass
class CleanerConfig:
    """Options controlling a pipeline run.

    Parameters
    ----------
    drop_raw_date : bool, default True
        Drop ``sale_date_raw`` once the duplicate pass has completed. After the
        drop the temporal phase can no longer be re-run on the output.
    phase_retries : int, default 0
        How many times a phase is retried as a whole after a
        :class:`~housing_cleaner.exceptions.StoreUnavailableError`.
    column_map : Optional[Dict[str, str]]
        Header renames applied when loading from a file.
    """

    drop_raw_date: bool = True
    phase_retries: int = 0
    column_map: Optional[Dict[str, str]] = field(default_factory=lambda: dict(NASHVILLE_COLUMN_MAP))

    def __post_init__(self) -> None:
        if self.phase_retries < 0:
            raise ValueError("phase_retries must be >= 0")
