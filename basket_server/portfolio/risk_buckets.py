"""Risk-bucket inference and similar-risk peer ranking."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from basket_server.portfolio.alignment import forward_fill
from basket_server.portfolio.index_builder import normalize_series
from basket_server.portfolio.kpi import compute_kpis
from basket_server.portfolio.models import KPI, PeerCandidate, RiskBucket, TickerSeries, UniverseRow

LABELS: tuple[RiskBucket, ...] = ("low", "medium", "high")
LABEL_ALIASES: dict[str, RiskBucket] = {"med": "medium"}

LOW_KEYWORDS = ("bond", "treasury", "cash", "money market", "utilities", "utility", "staples")
HIGH_KEYWORDS = ("emerging", "sector", "leveraged", "2x", "3x", "inverse", "crypto", "bitcoin", "ethereum")

ADJACENT_BUCKETS: dict[RiskBucket, tuple[RiskBucket, ...]] = {
    "low": ("low", "medium"),
    "medium": ("medium", "low", "high"),
    "high": ("high", "medium"),
    "unknown": ("unknown", "low", "medium", "high"),
}

DEFAULT_PEERS_LIMIT = 6


def normalize_bucket(label: str | None) -> RiskBucket:
    text = (label or "").strip().lower()
    if not text:
        return "unknown"
    for bucket in LABELS:
        if text.startswith(bucket):
            return bucket
    for prefix, bucket in LABEL_ALIASES.items():
        if text.startswith(prefix):
            return bucket
    for bucket in LABELS:
        if bucket in text:
            return bucket
    return "unknown"


def infer_bucket_from_text(*texts: str | None) -> RiskBucket:
    blob = " ".join(text for text in texts if text).lower()
    if any(keyword in blob for keyword in LOW_KEYWORDS):
        return "low"
    if any(keyword in blob for keyword in HIGH_KEYWORDS):
        return "high"
    return "medium"


def resolve_bucket(row: UniverseRow) -> RiskBucket:
    bucket = normalize_bucket(row.risk_bucket)
    if bucket != "unknown":
        return bucket
    return infer_bucket_from_text(row.asset_class, row.name)


def bucket_map(universe: Iterable[UniverseRow]) -> dict[str, RiskBucket]:
    return {row.ticker: resolve_bucket(row) for row in universe}


def portfolio_bucket(weights: Mapping[str, float], buckets: Mapping[str, RiskBucket]) -> RiskBucket:
    """Bucket holding the largest share of weight; ties go to the first one met."""
    totals: dict[RiskBucket, float] = {}
    for ticker, weight in weights.items():
        if weight <= 0:
            continue
        bucket = buckets.get(ticker, "unknown")
        totals[bucket] = totals.get(bucket, 0.0) + weight
    best: RiskBucket = "unknown"
    best_weight = 0.0
    for bucket, total in totals.items():
        if total > best_weight:
            best, best_weight = bucket, total
    return best


def candidate_kpi(
    series: TickerSeries,
    calendar: list[str],
    indices: list[int] | None = None,
    base_value: float = 100.0,
) -> KPI | None:
    aligned = forward_fill(series, calendar, head_fill=False)
    if indices is not None:
        aligned = aligned.take(indices)
    if aligned.finite_count() < 2:
        return None
    return compute_kpis(aligned.dates, normalize_series(aligned.values, base_value))


def rank_peers(
    universe: Iterable[UniverseRow],
    held: Iterable[str],
    benchmark: str | None,
    series: Mapping[str, TickerSeries],
    calendar: list[str],
    indices: list[int] | None,
    reference: KPI,
    risk_bucket: RiskBucket,
    limit: int = DEFAULT_PEERS_LIMIT,
    base_value: float = 100.0,
) -> list[PeerCandidate]:
    """Best performers among same-or-adjacent-risk tickers outside the basket.

    Candidates are aligned onto ``calendar``, cut to ``indices``, and those
    strictly beating ``reference`` are preferred; when none does, the best of
    the rest are returned.
    """
    allowed = ADJACENT_BUCKETS[risk_bucket]
    excluded = set(held)
    if benchmark:
        excluded.add(benchmark)

    scored: list[PeerCandidate] = []
    for row in universe:
        if row.ticker in excluded or row.ticker not in series:
            continue
        bucket = resolve_bucket(row)
        if bucket not in allowed:
            continue
        kpi = candidate_kpi(series[row.ticker], calendar, indices, base_value)
        if kpi is None:
            continue
        scored.append(
            PeerCandidate(
                ticker=row.ticker,
                name=row.name,
                bucket=bucket,
                kpi=kpi,
                beats_portfolio=kpi.total_return > reference.total_return,
            )
        )
        excluded.add(row.ticker)

    scored.sort(key=lambda peer: peer.kpi.total_return, reverse=True)
    winners = [peer for peer in scored if peer.beats_portfolio]
    return (winners or scored)[: max(0, limit)]
