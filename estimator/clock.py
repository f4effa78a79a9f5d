"""Reference clock used when callers do not pass an explicit reference date."""
from datetime import datetime, timezone
from typing import Iterable


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_reference_date(reference_date: datetime | None, timestamps: Iterable[datetime] = ()) -> datetime:
    """
    Returns the given reference date, or "now" if None.

    "Now" follows the records it will be compared with: aware UTC by default,
    naive local time when the first of `timestamps` is naive.
    """
    if reference_date is not None:
        return reference_date
    for timestamp in timestamps:
        if timestamp.utcoffset() is None:
            return datetime.now()
        break
    return utcnow()
