"""Shared fixtures for housing cleaner tests."""

import pandas as pd
import pytest

from housing_cleaner.store import RecordStore


def _record(id, parcel, address, date, price, legal, vacant, owner):
    return {
        "id": id,
        "parcel_id": parcel,
        "property_address_raw": address,
        "sale_date_raw": date,
        "sale_price": price,
        "legal_reference": legal,
        "sold_as_vacant_raw": vacant,
        "owner_address_raw": owner,
    }


@pytest.fixture
def records_frame() -> pd.DataFrame:
    """Six sale records covering every kind of repair the pipeline makes."""
    return pd.DataFrame(
        [
            _record(1, "007 00 0 125.00", "123 Main St, Nashville", "2013-04-09 00:00:00.000",
                    100000, "20130412-0036474", "Y", "123 Main St, Nashville, TN"),
            _record(2, "7", None, "April 10, 2013",
                    200000, "20130410-0002", "N", None),
            _record(3, "7", "5 Pine Rd, Gallatin", "2014-01-02",
                    150000, "20140102-0003", "Yes", "5 Pine Rd, Gallatin, TN"),
            _record(4, "007 00 0 125.00", "123 Main St, Nashville", "April 9, 2013",
                    100000, "20130412-0036474", "No", "123 Main St, Nashville, TN"),
            _record(5, "999", None, "unknown",
                    50000, "20150101-0005", "Maybe", "NOADDRESS"),
            _record(6, "101", "456 Oak Ave, Nashville", "2015-06-01",
                    300000, "20150601-0006", "No", "456 Oak Ave, Nashville, TN"),
        ]
    )


@pytest.fixture
def store(records_frame) -> RecordStore:
    return RecordStore.from_frame(records_frame)


@pytest.fixture
def nashville_csv(tmp_path, records_frame):
    """The sample records written with the source dataset's headers."""
    renamed = records_frame.rename(
        columns={
            "id": "UniqueID ",
            "parcel_id": "ParcelID",
            "property_address_raw": "PropertyAddress",
            "sale_date_raw": "SaleDate",
            "sale_price": "SalePrice",
            "legal_reference": "LegalReference",
            "sold_as_vacant_raw": "SoldAsVacant",
            "owner_address_raw": "OwnerAddress",
        }
    )
    renamed["OwnerName"] = "SMITH, JOHN"
    path = tmp_path / "nashville.csv"
    renamed.to_csv(path, index=False)
    return path
