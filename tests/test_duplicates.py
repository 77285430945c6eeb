"""Tests for duplicate transaction removal."""

import datetime

import pandas as pd

from housing_cleaner.duplicates import IDENTITY_KEY, rank_within_partitions, remove_duplicates
from housing_cleaner.store import RecordStore

SALE_DAY = datetime.date(2013, 4, 9)


def _row(id, parcel="7", address="5 Pine Rd, Gallatin", price=100000, date=SALE_DAY, legal="L1"):
    return {
        "id": id,
        "parcel_id": parcel,
        "property_address_raw": address,
        "sale_price": price,
        "sale_date": date,
        "legal_reference": legal,
    }


class TestRemoveDuplicates:

    def test_lowest_id_survives(self):
        store = RecordStore.from_frame(pd.DataFrame([_row(14), _row(3), _row(9)]))
        report = remove_duplicates(store)
        assert store.ids == [3]
        assert report.removed == 2
        assert report.details["duplicate_sets"] == 1

    def test_distinct_records_untouched(self):
        store = RecordStore.from_frame(
            pd.DataFrame([_row(1), _row(2, price=1), _row(3, legal="L2"), _row(4, date=None)])
        )
        report = remove_duplicates(store)
        assert report.removed == 0
        assert len(store) == 4

    def test_null_key_values_compare_equal(self):
        store = RecordStore.from_frame(pd.DataFrame([_row(1, address=None), _row(2, address=None)]))
        remove_duplicates(store)
        assert store.ids == [1]

    def test_surviving_keys_are_unique(self):
        rows = [_row(i, parcel=str(i % 3), price=(i % 2) * 10) for i in range(1, 13)]
        store = RecordStore.from_frame(pd.DataFrame(rows))
        remove_duplicates(store)
        df = store.load_all()
        assert not df.duplicated(subset=list(IDENTITY_KEY)).any()
        assert store.ids == [1, 2, 3, 4, 5, 6]

    def test_rerun_is_noop(self):
        store = RecordStore.from_frame(pd.DataFrame([_row(1), _row(2)]))
        remove_duplicates(store)
        assert remove_duplicates(store).removed == 0


class TestRanking:

    def test_ranks_follow_id_order(self):
        df = pd.DataFrame([_row(14), _row(3), _row(9), _row(5, parcel="8")]).set_index(
            pd.Index([14, 3, 9, 5])
        )
        ranks = rank_within_partitions(df)
        assert ranks.to_dict() == {14: 3, 3: 1, 9: 2, 5: 1}
