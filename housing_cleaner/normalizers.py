"""Value-level normalisation: sale dates and the ``SoldAsVacant`` flag."""

from __future__ import annotations

import datetime
from typing import Optional

import pandas as pd
from dateutil import parser as date_parser
from dateutil.parser import ParserError

from .exceptions import MalformedInputError

SOLD_AS_VACANT_MAP = {"Y": "Yes", "N": "No"}

# two unrelated defaults; a field missing from the input shows up as a mismatch
_DEFAULT_A = datetime.datetime(2000, 1, 1)
_DEFAULT_B = datetime.datetime(2001, 2, 2)


def is_null(value) -> bool:
    """``True`` for ``None``, NaN, NaT and ``pd.NA``."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-likes are never null scalars
        return False


def is_blank(value) -> bool:
    """Like :func:`is_null`, but strings that are empty after stripping count too."""
    if isinstance(value, str):
        return not value.strip()
    return is_null(value)


def normalize_sold_as_vacant(raw):
    """Map ``"Y"``/``"N"`` to ``"Yes"``/``"No"``; return anything else unchanged.

    Unexpected values are kept verbatim so they can be audited later.
    """
    if isinstance(raw, str):
        return SOLD_AS_VACANT_MAP.get(raw, raw)
    return raw


def standardize_sale_date(value) -> Optional[datetime.date]:
    """Convert a loosely typed sale date into a :class:`datetime.date`.

    Any time-of-day component is discarded. ``None``, NaN/NaT/NA and blank
    strings yield ``None``. Anything that cannot be parsed, or that lacks a
    day, month or year, raises :class:`MalformedInputError`.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            first = date_parser.parse(text, default=_DEFAULT_A)
            second = date_parser.parse(text, default=_DEFAULT_B)
        except (ParserError, OverflowError, ValueError) as exc:
            raise MalformedInputError(f"Unparseable sale date: {value!r}", value) from exc
        if first.date() != second.date():
            raise MalformedInputError(f"Incomplete sale date: {value!r}", value)
        return first.date()
    if is_null(value):
        return None
    # pd.Timestamp is a datetime subclass, so it is covered here as well
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    raise MalformedInputError(f"Unsupported sale date type: {type(value).__name__}", value)
