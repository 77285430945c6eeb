"""Tests for the property address backfill pass."""

import pandas as pd

from housing_cleaner.backfill import backfill_property_addresses
from housing_cleaner.report import ORPHAN_BACKFILL
from housing_cleaner.store import RecordStore


def _store(rows):
    return RecordStore.from_frame(
        pd.DataFrame(rows, columns=["id", "parcel_id", "property_address_raw"])
    )


class TestBackfill:

    def test_fills_from_sibling(self):
        store = _store([(1, 7, None), (2, 7, "5 Pine Rd, Gallatin")])
        report = backfill_property_addresses(store)
        assert store.get(1, "property_address_raw") == "5 Pine Rd, Gallatin"
        assert store.get(2, "property_address_raw") == "5 Pine Rd, Gallatin"
        assert report.examined == 2
        assert report.mutated == 1
        assert report.anomalies == []

    def test_blank_string_counts_as_missing(self):
        store = _store([(1, 7, "  "), (2, 7, "5 Pine Rd, Gallatin")])
        backfill_property_addresses(store)
        assert store.get(1, "property_address_raw") == "5 Pine Rd, Gallatin"

    def test_lowest_id_donor_wins(self):
        """Disagreeing siblings resolve to the lowest id, regardless of row order."""
        store = _store([(10, "A", "10 X St, Nashville"), (7, "A", None), (5, "A", "5 Y St, Nashville")])
        backfill_property_addresses(store)
        assert store.get(7, "property_address_raw") == "5 Y St, Nashville"

    def test_orphan_is_reported(self):
        store = _store([(1, "A", None), (2, "A", None), (3, "B", "1 Z St, Nashville")])
        report = backfill_property_addresses(store)
        assert store.get(1, "property_address_raw") is None
        assert report.mutated == 0
        assert [a.record_id for a in report.anomalies] == [1, 2]
        assert {a.kind for a in report.anomalies} == {ORPHAN_BACKFILL}
        assert report.details["orphan_parcels"] == 1

    def test_null_parcel_is_orphan(self):
        store = _store([(1, None, None), (2, None, "1 Z St, Nashville")])
        report = backfill_property_addresses(store)
        assert store.get(1, "property_address_raw") is None
        assert len(report.anomalies) == 1

    def test_rerun_is_noop(self, store):
        backfill_property_addresses(store)
        before = store.load_all()
        report = backfill_property_addresses(store)
        assert report.mutated == 0
        pd.testing.assert_frame_equal(before, store.load_all())

    def test_siblings_share_address(self, store):
        backfill_property_addresses(store)
        df = store.load_all()
        known = df.dropna(subset=["property_address_raw"])
        assert (known.groupby("parcel_id")["property_address_raw"].nunique() == 1).all()
        assert df.loc[2, "property_address_raw"] == "5 Pine Rd, Gallatin"
