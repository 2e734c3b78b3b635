"""Shared date axis built from several price series."""

from __future__ import annotations

from collections.abc import Iterable

from basket_server.portfolio.models import TickerSeries


def build_calendar(series: Iterable[TickerSeries]) -> list[str]:
    """Union of every date key seen in ``series``, sorted and deduplicated."""
    seen: set[str] = set()
    for item in series:
        seen.update(item.dates)
    return sorted(seen)
