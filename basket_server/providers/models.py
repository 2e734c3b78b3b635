"""Payload parsing for static series, universe and benchmark files."""

from __future__ import annotations

import math
from typing import Any

from basket_server.portfolio.models import BenchmarkRow, TickerSeries, UniverseRow


def _as_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def parse_series_file(payload: dict[str, Any], ticker: str | None = None) -> TickerSeries:
    """``{ticker, dates, close, intervalMinutes?}`` -> TickerSeries; bad closes become NaN."""
    if not isinstance(payload, dict):
        raise ValueError("Series payload must be a JSON object.")
    dates = payload.get("dates")
    closes = payload.get("close")
    if not isinstance(dates, list) or not isinstance(closes, list):
        raise ValueError("Series payload needs `dates` and `close` arrays.")
    interval = payload.get("intervalMinutes")
    return TickerSeries(
        ticker=str(payload.get("ticker") or ticker or "").strip().upper(),
        dates=[str(date) for date in dates],
        closes=[_as_float(close) for close in closes],
        interval_minutes=int(interval) if isinstance(interval, (int, float)) and not isinstance(interval, bool) else None,
    )


def series_to_payload(series: TickerSeries) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ticker": series.ticker,
        "dates": list(series.dates),
        "close": [close if math.isfinite(close) else None for close in series.closes],
    }
    if series.interval_minutes is not None:
        payload["intervalMinutes"] = series.interval_minutes
    return payload


def parse_universe(payload: Any) -> list[UniverseRow]:
    if not isinstance(payload, list):
        raise ValueError("Universe payload must be a JSON array.")
    rows: list[UniverseRow] = []
    seen: set[str] = set()
    for item in payload:
        if not isinstance(item, dict) or not item.get("ticker"):
            continue
        ticker = str(item["ticker"]).strip().upper()
        if ticker in seen:
            continue
        seen.add(ticker)
        rows.append(
            UniverseRow(
                ticker=ticker,
                name=str(item.get("name") or ""),
                asset_class=str(item.get("assetClass") or ""),
                risk_bucket=str(item.get("riskBucket") or ""),
            )
        )
    return rows


def parse_benchmarks(payload: Any) -> list[BenchmarkRow]:
    if not isinstance(payload, list):
        raise ValueError("Benchmark payload must be a JSON array.")
    return [
        BenchmarkRow(
            ticker=str(item["ticker"]).strip().upper(),
            label=str(item.get("label") or item["ticker"]),
            market=str(item.get("market") or "us").strip().lower(),
        )
        for item in payload
        if isinstance(item, dict) and item.get("ticker")
    ]
