"""Portfolio analytics orchestration service."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict
from typing import Any

from basket_server.portfolio.alignment import align_all, forward_fill, take_window
from basket_server.portfolio.calendar import build_calendar
from basket_server.portfolio.holdings import percents, set_percent, set_shares, set_total, sync_selection
from basket_server.portfolio.holdings import weights as holding_weights
from basket_server.portfolio.index_builder import build_portfolio_index, normalize_series
from basket_server.portfolio.intelligence import generate_summary
from basket_server.portfolio.kpi import compute_kpis, drawdown_series, index_kpis
from basket_server.portfolio.models import (
    KPI,
    BenchmarkComparison,
    PeerCandidate,
    PortfolioReport,
    TickerSeries,
    UniverseRow,
)
from basket_server.portfolio.risk_buckets import (
    ADJACENT_BUCKETS,
    bucket_map,
    portfolio_bucket,
    rank_peers,
    resolve_bucket,
)
from basket_server.portfolio.windows import select_window, validate_range_key
from basket_server.providers.series_store import LoadGeneration, SeriesStore
from basket_server.services.base import ServiceContext, validate_frequency, validate_market

LOGGER = logging.getLogger(__name__)

RECONCILE_OPERATIONS = ("set_shares", "set_percent", "set_total", "sync_selection")
CURRENT_RESOURCE_KEY = ("portfolio", "current_resource")


def _clean(value: Any) -> Any:
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _clean(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean(item) for item in value]
    return value


def report_payload(report: PortfolioReport) -> dict[str, Any]:
    """JSON-safe dict for a report; non-finite floats become null."""
    payload = _clean(asdict(report))
    payload["summary"] = generate_summary(report)
    return payload


def _as_count(value: float) -> int:
    if not math.isfinite(value) or not float(value).is_integer():
        raise ValueError("Share counts must be whole numbers.")
    return int(value)


def _normalize_tickers(tickers: list[str]) -> list[str]:
    return list(dict.fromkeys(ticker.strip().upper() for ticker in tickers if ticker and ticker.strip()))


class PortfolioService:
    def __init__(
        self,
        ctx: ServiceContext,
        resource_updated_callback: Callable[[str], None] | None = None,
    ) -> None:
        self.ctx = ctx
        self.generation = LoadGeneration()
        self._resource_updated_callback = resource_updated_callback

    @property
    def store(self) -> SeriesStore:
        return self.ctx.store  # type: ignore[return-value]

    def _store_current_resource_snapshot(self, report: PortfolioReport) -> None:
        snapshot = {"uri": "portfolio://current", "report_type": "portfolio", "payload": report_payload(report)}
        self.ctx.cache.set(CURRENT_RESOURCE_KEY, snapshot)
        if self._resource_updated_callback is not None:
            self._resource_updated_callback("portfolio://current")

    def get_current_resource_snapshot(self) -> dict[str, Any] | None:
        cached = self.ctx.cache.get(CURRENT_RESOURCE_KEY)
        return cached if isinstance(cached, dict) else None

    def reconcile(
        self,
        shares: Mapping[str, int],
        operation: str,
        ticker: str | None = None,
        value: float | None = None,
        tickers: list[str] | None = None,
    ) -> dict[str, int]:
        holdings = {name.strip().upper(): count for name, count in shares.items()}
        symbol = ticker.strip().upper() if ticker else None
        if operation == "sync_selection":
            if tickers is None:
                raise ValueError("sync_selection needs `tickers`.")
            return sync_selection(holdings, _normalize_tickers(tickers))
        if operation == "set_total":
            if value is None:
                raise ValueError("set_total needs `value`.")
            return set_total(holdings, _as_count(value))
        if operation in {"set_shares", "set_percent"}:
            if symbol is None or value is None:
                raise ValueError(f"{operation} needs `ticker` and `value`.")
            if operation == "set_shares":
                return set_shares(holdings, symbol, _as_count(value))
            return set_percent(holdings, symbol, float(value))
        raise ValueError(f"Operation must be one of: {', '.join(RECONCILE_OPERATIONS)}.")

    def series_kpis(self, dates: list[str], values: list[float]) -> KPI:
        clean = [math.nan if value is None else float(value) for value in values]
        return compute_kpis(dates, clean)

    def _benchmark(
        self,
        series: Mapping[str, TickerSeries],
        benchmark: str | None,
        label: str | None,
        calendar: list[str],
        indices: list[int],
        portfolio_kpi: KPI,
        has_index: bool,
    ) -> BenchmarkComparison | None:
        if not benchmark or benchmark not in series:
            return None
        aligned = forward_fill(series[benchmark], calendar, head_fill=False).take(indices)
        if aligned.finite_count() < 2:
            LOGGER.info("benchmark has too little data in window: benchmark=%s points=%s", benchmark, aligned.finite_count())
            return None
        normalized = normalize_series(aligned.values, self.ctx.base_value)
        kpi = compute_kpis(aligned.dates, normalized)
        return BenchmarkComparison(
            ticker=benchmark,
            label=label or benchmark,
            kpi=kpi,
            values=normalized,
            excess_return=portfolio_kpi.total_return - kpi.total_return if has_index else 0.0,
        )

    def compute_report(
        self,
        tickers: list[str],
        shares: Mapping[str, int],
        series: Mapping[str, TickerSeries],
        range_key: str,
        benchmark: str | None = None,
        benchmark_label: str | None = None,
        universe: list[UniverseRow] | None = None,
    ) -> PortfolioReport:
        """Run the full pipeline from scratch for one input state."""
        key = validate_range_key(range_key)
        selected = _normalize_tickers(tickers)
        holdings = sync_selection({name.strip().upper(): count for name, count in shares.items()}, selected)
        bench = benchmark.strip().upper() if benchmark else None

        present = [series[name] for name in selected if name in series]
        missing = [name for name in selected if name not in series]
        calendar = build_calendar(present)
        if not calendar and bench and bench in series:
            calendar = build_calendar([series[bench]])
        indices = select_window(calendar, key)
        windowed = take_window(align_all(present, calendar, head_fill=True), indices)

        current_weights = holding_weights(holdings)
        index = build_portfolio_index(windowed, current_weights, self.ctx.base_value)
        kpi = index_kpis(index)
        values = list(index.values) if index is not None else None
        if index is None:
            LOGGER.info("portfolio index unavailable: tickers=%s missing=%s range=%s", selected, missing, key)

        comparison = self._benchmark(series, bench, benchmark_label, calendar, indices, kpi, index is not None)
        risk = portfolio_bucket(current_weights, bucket_map(universe or []))
        peers: list[PeerCandidate] = []
        if universe:
            reference = kpi if index is not None else (comparison.kpi if comparison else KPI())
            peers = rank_peers(
                universe,
                holdings,
                bench,
                series,
                calendar,
                indices,
                reference,
                risk,
                limit=self.ctx.peers_limit,
                base_value=self.ctx.base_value,
            )

        return PortfolioReport(
            range_key=key,
            tickers=selected,
            shares=holdings,
            percents=percents(holdings),
            weights=current_weights,
            dates=[calendar[idx] for idx in indices],
            values=values,
            kpi=kpi,
            drawdown=drawdown_series(values) if values else [],
            risk_bucket=risk,
            missing_tickers=missing,
            benchmark=comparison,
            peers=peers,
        )

    async def refresh_async(
        self,
        tickers: list[str],
        shares: Mapping[str, int],
        range_key: str,
        benchmark: str | None = None,
        market: str | None = None,
        frequency: str | None = None,
    ) -> PortfolioReport | None:
        """Load what the report needs and compute it; None when a newer refresh started meanwhile.

        ``benchmark=None`` uses the configured default; an empty string disables it.
        """
        token = self.generation.begin()
        market = validate_market(market or self.ctx.default_market)
        frequency = validate_frequency(frequency or self.ctx.default_frequency)
        selected = _normalize_tickers(tickers)
        if benchmark is None:
            benchmark = self.ctx.default_benchmark
        bench = benchmark.strip().upper() if benchmark else None

        universe = await asyncio.to_thread(self.store.load_universe)
        benchmarks = await asyncio.to_thread(self.store.load_benchmarks)
        label = next((row.label for row in benchmarks if row.ticker == bench), bench)

        holdings = sync_selection({name.strip().upper(): count for name, count in shares.items()}, selected)
        risk = portfolio_bucket(holding_weights(holdings), bucket_map(universe))
        allowed = ADJACENT_BUCKETS[risk]
        candidates = [row.ticker for row in universe if resolve_bucket(row) in allowed]
        wanted = selected + ([bench] if bench else []) + candidates
        series = await self.store.load_many_async(wanted, market, frequency)

        if not self.generation.is_current(token):
            LOGGER.info("stale portfolio load dropped: token=%s current=%s", token, self.generation.current)
            return None
        report = self.compute_report(selected, holdings, series, range_key, bench, label, universe)
        self._store_current_resource_snapshot(report)
        return report

    def refresh(
        self,
        tickers: list[str],
        shares: Mapping[str, int],
        range_key: str,
        benchmark: str | None = None,
        market: str | None = None,
        frequency: str | None = None,
    ) -> PortfolioReport | None:
        def _run() -> PortfolioReport | None:
            return asyncio.run(self.refresh_async(tickers, shares, range_key, benchmark, market, frequency))

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return _run()
        with ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(_run).result()
