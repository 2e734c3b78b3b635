"""Projection of sparse per-ticker series onto a shared calendar.

Gaps are resolved to the most recent prior print, never interpolated. Head
gaps (calendar dates before the first print) are left as NaN unless the
caller asks for a head back-fill:

* ``head_fill=True`` is used when combining the selected tickers of one
  portfolio onto their own union calendar, and by the static series builder,
  so the earliest bar stays plottable.
* ``head_fill=False`` is used for the benchmark and peer candidates aligned
  onto the portfolio's windowed calendar: a ticker that simply has no data
  for part of the requested range must not pretend it did.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import numpy as np
import pandas as pd

from basket_server.portfolio.models import AlignedSeries, TickerSeries


def forward_fill(series: TickerSeries, calendar: list[str], head_fill: bool = False) -> AlignedSeries:
    observed = pd.Series(series.closes, index=series.dates, dtype=float)
    observed = observed[np.isfinite(observed.to_numpy())]
    observed = observed[~observed.index.duplicated(keep="last")]
    filled = observed.reindex(calendar).ffill()
    if head_fill:
        # after ffill only the head can still be NaN
        filled = filled.bfill()
    return AlignedSeries(ticker=series.ticker, dates=list(calendar), values=filled.tolist())


def align_all(
    series: Iterable[TickerSeries],
    calendar: list[str],
    head_fill: bool = False,
) -> dict[str, AlignedSeries]:
    return {item.ticker: forward_fill(item, calendar, head_fill=head_fill) for item in series}


def take_window(aligned: Mapping[str, AlignedSeries], indices: list[int]) -> dict[str, AlignedSeries]:
    return {ticker: item.take(indices) for ticker, item in aligned.items()}
