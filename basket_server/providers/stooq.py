"""Static series builder backed by Stooq daily CSV downloads.

Fetches every ticker in the universe file, aligns them onto one shared
calendar (forward fill with head back-fill) and writes one
``{ticker, dates, close}`` JSON file per ticker for the series store.
"""

from __future__ import annotations

import argparse
import csv
import io
import json
import logging
import math
from collections.abc import Callable
from pathlib import Path
from urllib.parse import quote

from basket_server.config.settings import get_settings
from basket_server.portfolio.alignment import forward_fill
from basket_server.portfolio.calendar import build_calendar
from basket_server.portfolio.models import PricePoint, TickerSeries
from basket_server.providers.http import ProviderError, fetch_text
from basket_server.providers.models import parse_universe, series_to_payload
from basket_server.providers.series_store import UNIVERSE_FILE, series_path
from basket_server.runtime.monitoring import configure_logging

LOGGER = logging.getLogger(__name__)

STOOQ_DAILY_URL = "https://stooq.com/q/d/l/?s={symbol}&i=d"


def to_stooq_symbol(ticker: str) -> str | None:
    clean = str(ticker or "").strip().upper()
    if not clean:
        return None
    if "." in clean:
        return clean
    return f"{clean}.US"


def parse_stooq_csv(text: str, ticker: str) -> TickerSeries:
    reader = csv.reader(io.StringIO(text.strip()))
    header = next(reader, None)
    if not header:
        return TickerSeries(ticker=ticker, dates=[], closes=[])
    columns = [name.strip().lower() for name in header]
    if "date" not in columns or "close" not in columns:
        return TickerSeries(ticker=ticker, dates=[], closes=[])
    date_idx = columns.index("date")
    close_idx = columns.index("close")

    rows: list[PricePoint] = []
    for cols in reader:
        if len(cols) <= max(date_idx, close_idx):
            continue
        date = cols[date_idx].strip()
        try:
            close = float(cols[close_idx])
        except ValueError:
            continue
        if not date or not math.isfinite(close):
            continue
        rows.append(PricePoint(date=date, close=close))
    rows.sort(key=lambda point: point.date)
    return TickerSeries.from_points(ticker, rows)


def fetch_stooq_daily(ticker: str, user_agent: str, timeout_seconds: float = 15.0) -> TickerSeries:
    symbol = to_stooq_symbol(ticker)
    if symbol is None:
        raise ValueError("Empty ticker.")
    text = fetch_text(
        STOOQ_DAILY_URL.format(symbol=quote(symbol)),
        "stooq",
        timeout_seconds=timeout_seconds,
        headers={"user-agent": user_agent},
    )
    series = parse_stooq_csv(text, ticker.strip().upper())
    if len(series.dates) < 2:
        raise ValueError(f"Not enough rows for {symbol}.")
    return series


def build_series_files(
    tickers: list[str],
    out_dir: str | Path,
    fetch: Callable[[str], TickerSeries],
    market: str = "us",
) -> list[str]:
    """Download, align and write every ticker; returns the tickers written."""
    fetched: list[TickerSeries] = []
    for ticker in dict.fromkeys(ticker.strip().upper() for ticker in tickers if ticker.strip()):
        try:
            fetched.append(fetch(ticker))
        except (ProviderError, ValueError) as error:
            LOGGER.warning("skip ticker: ticker=%s error=%s", ticker, error)

    calendar = build_calendar(fetched)
    if len(calendar) < 2:
        raise ValueError("Calendar has fewer than 2 dates.")

    root = Path(out_dir)
    written: list[str] = []
    for series in fetched:
        aligned = forward_fill(series, calendar, head_fill=True)
        path = root / series_path(market, "daily", series.ticker)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(series_to_payload(aligned.as_series())), encoding="utf-8")
        written.append(series.ticker)
    LOGGER.info("series files written: market=%s count=%s dates=%s", market, len(written), len(calendar))
    return written


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Build static per-ticker series files from Stooq.")
    parser.add_argument("--data-dir", default=settings.data_dir, help="Directory holding universe.json")
    parser.add_argument("--market", default=settings.default_market)
    args = parser.parse_args(argv)
    configure_logging(settings.log_level)

    universe_path = Path(args.data_dir) / UNIVERSE_FILE
    universe = parse_universe(json.loads(universe_path.read_text(encoding="utf-8")))
    build_series_files(
        [row.ticker for row in universe],
        args.data_dir,
        lambda ticker: fetch_stooq_daily(ticker, settings.stooq_user_agent, settings.request_timeout_seconds),
        market=args.market,
    )


if __name__ == "__main__":
    main()
