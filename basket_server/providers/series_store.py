"""Per-ticker series loading from a static data directory or URL."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any

from basket_server.cache.ttl_cache import TTLCache
from basket_server.portfolio.models import BenchmarkRow, TickerSeries, UniverseRow
from basket_server.providers.http import ProviderError, fetch_json
from basket_server.providers.models import parse_benchmarks, parse_series_file, parse_universe

LOGGER = logging.getLogger(__name__)

UNIVERSE_FILE = "universe.json"
BENCHMARKS_FILE = "benchmarks.json"


class LoadGeneration:
    """Generation counter; results of a load are applied only while its token is current."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = Lock()

    def begin(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._value

    @property
    def current(self) -> int:
        with self._lock:
            return self._value


def series_path(market: str, frequency: str, ticker: str) -> str:
    return f"{market}/{frequency}/{ticker.upper()}.json"


class SeriesStore:
    def __init__(
        self,
        root: str | Path,
        cache: TTLCache,
        base_url: str | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        self.root = Path(root)
        self.cache = cache
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout_seconds = timeout_seconds

    def _read_json(self, relative: str) -> Any | None:
        if self.base_url:
            try:
                return fetch_json(f"{self.base_url}/{relative}", "static", timeout_seconds=self.timeout_seconds)
            except ProviderError as error:
                if error.code == "NOT_FOUND":
                    return None
                raise
        path = self.root / relative
        if not path.is_file():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def load_series(self, ticker: str, market: str = "us", frequency: str = "daily") -> TickerSeries | None:
        """Cached by ``(market, frequency, ticker)``; misses are not cached."""
        symbol = ticker.strip().upper()
        return self.cache.get_or_set((market, frequency, symbol), lambda: self._fetch_series(symbol, market, frequency))

    def _fetch_series(self, symbol: str, market: str, frequency: str) -> TickerSeries | None:
        try:
            payload = self._read_json(series_path(market, frequency, symbol))
        except (ProviderError, OSError, ValueError) as error:
            LOGGER.warning("series load failed: market=%s frequency=%s ticker=%s error=%s", market, frequency, symbol, error)
            return None
        if payload is None:
            LOGGER.info("series not found: market=%s frequency=%s ticker=%s", market, frequency, symbol)
            return None
        try:
            series = parse_series_file(payload, ticker=symbol).sorted()
        except ValueError as error:
            LOGGER.warning("series payload rejected: ticker=%s error=%s", symbol, error)
            return None
        return series

    async def load_many_async(
        self,
        tickers: list[str],
        market: str = "us",
        frequency: str = "daily",
    ) -> dict[str, TickerSeries]:
        unique = list(dict.fromkeys(tickers))
        results = await asyncio.gather(
            *(asyncio.to_thread(self.load_series, ticker, market, frequency) for ticker in unique)
        )
        return {series.ticker: series for series in results if series is not None}

    def _load_table(self, filename: str) -> Any:
        return self.cache.get_or_set(("table", filename), lambda: self._fetch_table(filename)) or []

    def _fetch_table(self, filename: str) -> Any | None:
        try:
            payload = self._read_json(filename)
        except (ProviderError, OSError, ValueError) as error:
            LOGGER.warning("reference table load failed: file=%s error=%s", filename, error)
            return None
        if payload is None:
            LOGGER.info("reference table not found: file=%s", filename)
        return payload

    def load_universe(self) -> list[UniverseRow]:
        return parse_universe(self._load_table(UNIVERSE_FILE))

    def load_benchmarks(self) -> list[BenchmarkRow]:
        return parse_benchmarks(self._load_table(BENCHMARKS_FILE))
