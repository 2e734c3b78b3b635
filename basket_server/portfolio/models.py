"""Typed portfolio models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal

RiskBucket = Literal["low", "medium", "high", "unknown"]
RangeKey = Literal["1D", "5D", "6M", "YTD", "1Y", "5Y", "ALL"]

RANGE_KEYS: tuple[str, ...] = ("1D", "5D", "6M", "YTD", "1Y", "5Y", "ALL")


@dataclass(frozen=True)
class PricePoint:
    date: str
    close: float


@dataclass
class TickerSeries:
    """Closes for one ticker; ``dates[i]`` pairs with ``closes[i]``."""

    ticker: str
    dates: list[str]
    closes: list[float]
    interval_minutes: int | None = None

    def __post_init__(self) -> None:
        if len(self.dates) != len(self.closes):
            raise ValueError(
                f"{self.ticker}: dates ({len(self.dates)}) and closes ({len(self.closes)}) must have equal length."
            )

    @classmethod
    def from_points(cls, ticker: str, points: list[PricePoint]) -> TickerSeries:
        return cls(ticker=ticker, dates=[p.date for p in points], closes=[p.close for p in points])

    def sorted(self) -> TickerSeries:
        # later duplicates win
        by_date = dict(zip(self.dates, self.closes))
        dates = sorted(by_date)
        return TickerSeries(
            ticker=self.ticker,
            dates=dates,
            closes=[by_date[d] for d in dates],
            interval_minutes=self.interval_minutes,
        )


@dataclass
class AlignedSeries:
    ticker: str
    dates: list[str]
    values: list[float]

    def as_series(self) -> TickerSeries:
        return TickerSeries(ticker=self.ticker, dates=list(self.dates), closes=list(self.values))

    def take(self, indices: list[int]) -> AlignedSeries:
        return AlignedSeries(
            ticker=self.ticker,
            dates=[self.dates[i] for i in indices],
            values=[self.values[i] for i in indices],
        )

    def finite_count(self) -> int:
        return sum(1 for value in self.values if math.isfinite(value))


@dataclass(frozen=True)
class PortfolioIndex:
    dates: tuple[str, ...]
    values: tuple[float, ...]


@dataclass(frozen=True)
class KPI:
    total_return: float = 0.0
    cagr: float = 0.0
    max_drawdown: float = 0.0


@dataclass(frozen=True)
class UniverseRow:
    ticker: str
    name: str = ""
    asset_class: str = ""
    risk_bucket: str = ""


@dataclass(frozen=True)
class BenchmarkRow:
    ticker: str
    label: str
    market: str


@dataclass(frozen=True)
class PeerCandidate:
    ticker: str
    name: str
    bucket: RiskBucket
    kpi: KPI
    beats_portfolio: bool = False


@dataclass
class BenchmarkComparison:
    ticker: str
    label: str
    kpi: KPI
    values: list[float] | None = None
    excess_return: float = 0.0


@dataclass
class PortfolioReport:
    range_key: str
    tickers: list[str]
    shares: dict[str, int]
    percents: dict[str, float]
    weights: dict[str, float]
    dates: list[str]
    values: list[float] | None
    kpi: KPI
    drawdown: list[float]
    risk_bucket: RiskBucket = "unknown"
    missing_tickers: list[str] = field(default_factory=list)
    benchmark: BenchmarkComparison | None = None
    peers: list[PeerCandidate] = field(default_factory=list)

    @property
    def has_index(self) -> bool:
        return self.values is not None


@dataclass
class ValidationIssue:
    field: str
    message: str
    row: int | None = None
    code: str = "invalid_value"
