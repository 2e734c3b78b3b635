"""Named lookback windows over a calendar."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from basket_server.portfolio.models import RANGE_KEYS

LOGGER = logging.getLogger(__name__)

WINDOW_OFFSETS: dict[str, pd.DateOffset] = {
    "1D": pd.DateOffset(days=1),
    "5D": pd.DateOffset(days=5),
    "6M": pd.DateOffset(months=6),
    "1Y": pd.DateOffset(years=1),
    "5Y": pd.DateOffset(years=5),
}
# Used when the calendar labels are not parseable dates.
ORDINAL_LENGTHS = {"1D": 2, "5D": 6}
# Smallest window drawn once the calendar has at least two entries.
WINDOW_MINIMUMS = {"1D": 2, "5D": 6}
DEFAULT_WINDOW_MINIMUM = 12


def validate_range_key(range_key: str) -> str:
    clean = range_key.strip().upper()
    if clean not in RANGE_KEYS:
        raise ValueError(f"Range must be one of: {', '.join(RANGE_KEYS)}.")
    return clean


def parse_calendar(calendar: list[str]) -> pd.DatetimeIndex | None:
    """UTC timestamps for ``calendar``, or None when any label is not an ISO date."""
    if not calendar:
        return pd.DatetimeIndex([], tz="UTC")
    try:
        return pd.DatetimeIndex(pd.to_datetime(calendar, utc=True, format="ISO8601"))
    except (ValueError, TypeError):
        return None


def _last(count: int, length: int) -> list[int]:
    return list(range(max(0, length - count), length))


def _cutoff(anchor: pd.Timestamp, range_key: str) -> pd.Timestamp:
    if range_key == "YTD":
        return pd.Timestamp(year=anchor.year, month=1, day=1, tz="UTC")
    return anchor - WINDOW_OFFSETS[range_key]


def select_window(calendar: list[str], range_key: str) -> list[int]:
    key = validate_range_key(range_key)
    length = len(calendar)
    if length == 0:
        return []
    if key == "ALL":
        return list(range(length))

    parsed = parse_calendar(calendar)
    if parsed is None:
        LOGGER.debug("calendar not parseable as dates, using ordinal window: range=%s length=%s", key, length)
        selected = _last(ORDINAL_LENGTHS.get(key, length), length)
    else:
        cutoff = _cutoff(parsed[-1], key)
        selected = np.flatnonzero(parsed >= cutoff).tolist()

    if len(selected) < 2 and length >= 2:
        minimum = WINDOW_MINIMUMS.get(key, DEFAULT_WINDOW_MINIMUM)
        selected = _last(min(length, minimum), length)
    return selected


def window_calendar(calendar: list[str], range_key: str) -> list[str]:
    return [calendar[idx] for idx in select_window(calendar, range_key)]
