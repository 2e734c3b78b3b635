"""Return and drawdown statistics for an index series."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
import pandas as pd

from basket_server.portfolio.models import KPI, PortfolioIndex
from basket_server.portfolio.windows import parse_calendar

DAYS_PER_YEAR = 365.25
MIN_YEARS = 1 / DAYS_PER_YEAR


def _finite_points(dates: Sequence[str], values: Sequence[float]) -> tuple[list[str], list[float]]:
    kept_dates: list[str] = []
    kept_values: list[float] = []
    for date, value in zip(dates, values):
        if value is not None and math.isfinite(value):
            kept_dates.append(date)
            kept_values.append(float(value))
    return kept_dates, kept_values


def elapsed_years(first_date: str, last_date: str) -> float | None:
    parsed = parse_calendar([first_date, last_date])
    if parsed is None:
        return None
    days = (parsed[1] - parsed[0]).total_seconds() / 86400.0
    return max(days / DAYS_PER_YEAR, MIN_YEARS)


def annualize(total_return: float, years: float) -> float:
    growth = 1.0 + total_return
    if growth <= 0:
        return -1.0
    try:
        return math.pow(growth, 1.0 / years) - 1.0
    except OverflowError:
        return math.inf


def drawdown_series(values: Sequence[float]) -> list[float]:
    """Distance below the running peak per point; NaN where the value is missing."""
    series = pd.Series(values, dtype=float)
    series = series.where(np.isfinite(series.to_numpy()))
    peak = series.cummax()
    drawdown = np.where(peak > 0, series / peak - 1.0, 0.0)
    return pd.Series(drawdown).where(series.notna()).tolist()


def max_drawdown(values: Sequence[float]) -> float:
    worst = pd.Series(drawdown_series(values), dtype=float).min()
    if pd.isna(worst):
        return 0.0
    return min(0.0, float(worst))


def compute_kpis(dates: Sequence[str], values: Sequence[float]) -> KPI:
    """Total return, CAGR and max drawdown; zeros when fewer than two finite points."""
    kept_dates, kept_values = _finite_points(dates, values)
    if len(kept_values) < 2:
        return KPI()
    first, last = kept_values[0], kept_values[-1]
    total_return = last / first - 1.0 if first > 0 else 0.0
    years = elapsed_years(kept_dates[0], kept_dates[-1])
    cagr = annualize(total_return, years) if years is not None else 0.0
    return KPI(total_return=total_return, cagr=cagr, max_drawdown=max_drawdown(kept_values))


def index_kpis(index: PortfolioIndex | None) -> KPI:
    if index is None:
        return KPI()
    return compute_kpis(index.dates, index.values)


def format_pct(value: float) -> str:
    return f"{value * 100:.1f}%"
