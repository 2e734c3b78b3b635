"""Weighted, normalized basket index."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

import numpy as np

from basket_server.portfolio.models import AlignedSeries, PortfolioIndex

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_VALUE = 100.0


def first_finite(values: list[float]) -> float | None:
    for value in values:
        if math.isfinite(value):
            return float(value)
    return None


def normalize_series(values: list[float], base_value: float = DEFAULT_BASE_VALUE) -> list[float]:
    """Rescale so the first finite value equals ``base_value``.

    Without a finite, non-zero base the divisor is 1.
    """
    base = first_finite(values)
    if base is None or base == 0:
        base = 1.0
    array = np.asarray(values, dtype=float)
    return (array * base_value / base).tolist()


def present_weights(aligned: Mapping[str, AlignedSeries], weights: Mapping[str, float]) -> dict[str, float]:
    """Weights renormalized over the tickers that actually have price data."""
    present = {
        ticker: float(weight)
        for ticker, weight in weights.items()
        if ticker in aligned
        and math.isfinite(weight)
        and weight > 0
        and aligned[ticker].finite_count() > 0
    }
    denominator = sum(present.values())
    if not math.isfinite(denominator) or denominator <= 0:
        return {}
    return {ticker: weight / denominator for ticker, weight in present.items()}


def build_portfolio_index(
    aligned: Mapping[str, AlignedSeries],
    weights: Mapping[str, float],
    base_value: float = DEFAULT_BASE_VALUE,
) -> PortfolioIndex | None:
    """Combine windowed per-ticker series into one index, or None if it cannot be computed."""
    renormalized = present_weights(aligned, weights)
    if not renormalized:
        missing = sorted(ticker for ticker in weights if ticker not in aligned)
        LOGGER.debug("no weighted ticker has data: missing=%s", missing)
        return None

    dates = aligned[next(iter(renormalized))].dates
    total = np.zeros(len(dates), dtype=float)
    usable = np.zeros(len(dates), dtype=bool)
    for ticker, weight in renormalized.items():
        series = aligned[ticker]
        if len(series.values) != len(dates):
            raise ValueError(f"{ticker}: series is not aligned to the shared calendar.")
        normalized = np.asarray(normalize_series(series.values, base_value), dtype=float)
        finite = np.isfinite(normalized)
        usable |= finite
        total += weight * np.where(finite, normalized, 0.0)

    if int(usable.sum()) < 2:
        return None
    return PortfolioIndex(dates=tuple(dates), values=tuple(float(value) for value in total))
