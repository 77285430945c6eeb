"""Top-level package for the housing sale records cleaner.

This package cleans a snapshot of real-estate sale records: it standardises
sale dates, backfills missing property addresses from records sharing a
parcel id, splits free-text addresses into components, normalises the
``SoldAsVacant`` flag and removes duplicate transactions. It exposes a command
line interface via ``python -m housing_cleaner.cli`` and programmatic access
through :class:`HousingCleaner` and :func:`run_pipeline`.

Example usage::

    from housing_cleaner import HousingCleaner
    cleaner = HousingCleaner()
    df, report = cleaner.clean_file("nashville.csv", output_path="cleaned.csv")
    print(report.to_dict())
"""

from .cleaner import HousingCleaner, run_pipeline  # noqa: F401
from .config import CleanerConfig  # noqa: F401
from .store import RecordStore  # noqa: F401

__all__ = ["CleanerConfig", "HousingCleaner", "RecordStore", "run_pipeline"]
