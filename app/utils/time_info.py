"""
TIME INFORMATION UTILITY
========================

Timestamps for stored records and response bodies, and a sort key that orders
records whose timestamps were written as ISO-8601 strings or as epoch
milliseconds (older data).
"""

import datetime
from typing import Any, Union

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp_sort_key(value: Union[int, float, str, Any]) -> datetime.datetime:
    """
    Convert a stored timestamp to an aware datetime for sorting.

    Integers and floats are epoch milliseconds. Strings are ISO-8601 (a trailing
    Z is accepted); naive strings are taken as UTC. Anything unparseable sorts first.
    """
    if isinstance(value, bool):
        return _EPOCH
    if isinstance(value, (int, float)):
        # Out-of-range, infinite and NaN values cannot become a datetime.
        try:
            return _EPOCH + datetime.timedelta(milliseconds=value)
        except (OverflowError, ValueError):
            return _EPOCH
    if isinstance(value, str):
        try:
            parsed = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=datetime.timezone.utc)
        return parsed
    return _EPOCH
