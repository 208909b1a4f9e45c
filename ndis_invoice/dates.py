"""Calendar-date normalization.

Override maps and holiday lookups key on ``YYYY-MM-DD``; everything that
builds or reads such a key goes through ``iso_key``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

DateLike = Union[date, datetime, str]


def as_date(value: DateLike) -> date:
    """Reduce a date, datetime or ISO string to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Cannot interpret {value!r} as a date")


def iso_key(value: DateLike) -> str:
    return as_date(value).isoformat()
