"""Fill missing property addresses from records sharing a parcel id.

A parcel has exactly one address, so a record with no ``property_address_raw``
can take the address of any sibling with the same ``parcel_id``. Records are
grouped by parcel once; the donor for each parcel is the sibling with the
lowest id, which keeps the output reproducible when siblings disagree.
"""

from __future__ import annotations

import logging

from .normalizers import is_blank
from .report import ORPHAN_BACKFILL, PhaseReport
from .store import ID_COLUMN, RecordStore

logger = logging.getLogger(__name__)

ADDRESS_COLUMN = "property_address_raw"
PARCEL_COLUMN = "parcel_id"


def backfill_property_addresses(store: RecordStore) -> PhaseReport:
    """Copy a sibling's address into every record whose address is missing.

    Records whose parcel has no known address at all stay empty and are
    reported as ``orphan_backfill`` anomalies.
    """
    report = PhaseReport(name="address_backfill")
    df = store.load_all()
    report.examined = len(df)

    missing = df[ADDRESS_COLUMN].map(is_blank)
    if not missing.any():
        return report

    donors = (
        df.loc[~missing & df[PARCEL_COLUMN].notna()]
        .sort_values(ID_COLUMN, kind="mergesort")
        .groupby(PARCEL_COLUMN, sort=False)[ADDRESS_COLUMN]
        .first()
    )

    updates = {}
    for record_id, parcel in df.loc[missing, PARCEL_COLUMN].items():
        address = donors.get(parcel) if not is_blank(parcel) else None
        if address is None:
            report.add_anomaly(
                ORPHAN_BACKFILL,
                record_id,
                ADDRESS_COLUMN,
                parcel,
                "No sibling record with a known address",
            )
            logger.debug("Orphan parcel %s for record %s", parcel, record_id)
            continue
        updates[record_id] = address

    report.mutated = store.update_many(ADDRESS_COLUMN, updates)
    report.details["orphan_parcels"] = len(
        {a.value for a in report.anomalies if a.kind == ORPHAN_BACKFILL}
    )
    return report
