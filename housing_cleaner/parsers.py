"""Free-text address splitting.

Property addresses arrive as ``"street, city"`` and owner addresses as
``"street, city, state"``. Both helpers are pure: ``None`` (or a blank string)
maps to ``None`` and a string without any comma raises
:class:`~housing_cleaner.exceptions.MalformedInputError`.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .exceptions import MalformedInputError
from .normalizers import is_blank


def _clean(segment: str) -> Optional[str]:
    segment = segment.strip()
    return segment or None


def split_property_address(value) -> Optional[Tuple[Optional[str], Optional[str]]]:
    """Split ``"123 Main St, Nashville"`` into ``("123 Main St", "Nashville")``.

    Only the first comma separates street from city; anything after it,
    further commas included, is the city.
    """
    if is_blank(value):
        return None
    text = str(value)
    street, sep, city = text.partition(",")
    if not sep:
        raise MalformedInputError(f"Property address has no ',' delimiter: {text!r}", value)
    return _clean(street), _clean(city)


def split_owner_address(value) -> Optional[Tuple[Optional[str], Optional[str], Optional[str]]]:
    """Split an owner address into ``(street, city, state)``.

    Segments are assigned from the right: the last one is the state, the one
    before it the city, and whatever precedes those is rejoined as the street.
    A two-part address therefore has no street.
    """
    if is_blank(value):
        return None
    text = str(value)
    segments = text.split(",")
    if len(segments) < 2:
        raise MalformedInputError(f"Owner address has no ',' delimiter: {text!r}", value)
    state = _clean(segments[-1])
    city = _clean(segments[-2])
    rest = [s.strip() for s in segments[:-2]]
    street = _clean(", ".join(s for s in rest if s)) if rest else None
    return street, city, state
