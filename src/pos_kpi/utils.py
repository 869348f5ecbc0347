"""Shared utilities for the KPI engine.

This module provides the small helpers every component relies on:

- Date normalisation: turning the many shapes a stored ``fecha`` can take
  into a naive local calendar day
- Rounding: half-away-from-zero rounding on a pre-scaled value

Examples:
    >>> from datetime import date
    >>> from pos_kpi.utils import to_calendar_day, round_half_away
    >>> to_calendar_day("2024-03-01T18:45:00")
    datetime.date(2024, 3, 1)
    >>> round_half_away(40 / 3)
    13.33

"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import pandas as pd

# Plain ISO calendar day: YYYY-MM-DD
ISO_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Args:
        s: Date string in ISO format (YYYY-MM-DD).

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2024-03-01")
        datetime.date(2024, 3, 1)

    """
    return datetime.strptime(s, "%Y-%m-%d").date()


def _local_day(moment: datetime) -> date:
    """Calendar day of a datetime, converting aware values to local time."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def _day_from_epoch(value: float, per_second: int = 1) -> date:
    """Local calendar day of an epoch timestamp counted in 1/per_second units."""
    if isinstance(value, float) and math.isnan(value):
        raise ValueError("timestamp is NaN")
    try:
        return datetime.fromtimestamp(value / per_second).date()
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"timestamp out of range: {value!r}") from e


def to_calendar_day(value: Any) -> date:
    """Normalise a stored record date to a local calendar day.

    Accepted inputs:
    - ``date`` objects (returned as is)
    - ``datetime`` / ``pd.Timestamp`` (aware values converted to local time)
    - mappings with a numeric ``seconds`` key (store timestamp objects)
    - ints or floats, read as epoch milliseconds
    - strings: ``YYYY-MM-DD`` or anything ``pd.to_datetime`` understands

    Args:
        value: The raw date value.

    Returns:
        The calendar day the value falls on.

    Raises:
        ValueError: If the value is missing or cannot be interpreted as a date.

    """
    if value is None:
        raise ValueError("date is missing")
    if isinstance(value, datetime):
        return _local_day(value)
    if isinstance(value, date):
        return value
    if isinstance(value, Mapping):
        seconds = value.get("seconds")
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return _day_from_epoch(seconds)
        raise ValueError(f"timestamp mapping without numeric 'seconds': {value!r}")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _day_from_epoch(value, per_second=1000)
    if isinstance(value, str):
        text = value.strip()
        if ISO_DAY_RE.match(text):
            return parse_date(text)
        try:
            parsed = pd.to_datetime(text)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"could not parse date string {value!r}") from e
        if pd.isna(parsed):
            raise ValueError(f"could not parse date string {value!r}")
        return _local_day(parsed.to_pydatetime())
    raise ValueError(f"unsupported date value {value!r}")


def round_half_away(value: float, decimals: int = 2) -> float:
    """Round to ``decimals`` places, ties away from zero.

    The value is scaled by ``10 ** decimals`` first and the scaled value is
    rounded, so the result follows the float product rather than the decimal
    text of ``value``.

    Examples:
        >>> round_half_away(1.125)
        1.13
        >>> round_half_away(-1.125)
        -1.13

    """
    factor = 10**decimals
    scaled = value * factor
    whole = math.floor(abs(scaled))
    # floor(x + 0.5) carries values just below .5 up
    if abs(scaled) - whole >= 0.5:
        whole += 1
    rounded = whole / factor
    if scaled < 0 and rounded:
        return -rounded
    return rounded
