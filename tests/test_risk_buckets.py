import pytest

from basket_server.portfolio.kpi import compute_kpis
from basket_server.portfolio.models import KPI, TickerSeries, UniverseRow
from basket_server.portfolio.risk_buckets import (
    candidate_kpi,
    infer_bucket_from_text,
    normalize_bucket,
    portfolio_bucket,
    rank_peers,
    resolve_bucket,
)

CALENDAR = ["2024-01-01", "2024-01-02", "2024-01-03"]


def _series(ticker: str, closes: list[float], dates: list[str] | None = None) -> TickerSeries:
    return TickerSeries(ticker=ticker, dates=dates or list(CALENDAR), closes=closes)


UNIVERSE = [
    UniverseRow(ticker="AAPL", name="Apple", asset_class="Equity", risk_bucket="medium"),
    UniverseRow(ticker="SPY", name="S&P 500 ETF", asset_class="Equity", risk_bucket="medium"),
    UniverseRow(ticker="P1", name="Peer One", asset_class="Equity", risk_bucket="Medium"),
    UniverseRow(ticker="P2", name="Short Treasury", asset_class="Bond", risk_bucket=""),
    UniverseRow(ticker="P3", name="Crypto Miners", asset_class="Equity", risk_bucket="high"),
    UniverseRow(ticker="P4", name="Late Listing", asset_class="Equity", risk_bucket="medium"),
    UniverseRow(ticker="P5", name="No Data", asset_class="Equity", risk_bucket="medium"),
    UniverseRow(ticker="P1", name="Peer One Duplicate", asset_class="Equity", risk_bucket="medium"),
]

SERIES = {
    "AAPL": _series("AAPL", [10.0, 11.0, 12.0]),
    "SPY": _series("SPY", [100.0, 150.0, 300.0]),
    "P1": _series("P1", [10.0, 12.0, 15.0]),
    "P2": _series("P2", [100.0, 105.0, 110.0]),
    "P3": _series("P3", [1.0, 1.5, 1.8]),
    "P4": _series("P4", [50.0], dates=["2024-01-03"]),
}


def test_normalize_bucket_labels() -> None:
    assert normalize_bucket("LOW") == "low"
    assert normalize_bucket(" Medium-High ") == "medium"
    assert normalize_bucket("med") == "medium"
    assert normalize_bucket("very high") == "high"
    assert normalize_bucket("Medium/Low") == "medium"
    assert normalize_bucket("High-low range") == "high"
    assert normalize_bucket("med-low") == "medium"
    assert normalize_bucket("") == "unknown"
    assert normalize_bucket(None) == "unknown"
    assert normalize_bucket("speculative") == "unknown"


def test_infer_bucket_from_text_keywords() -> None:
    assert infer_bucket_from_text("Bond", "iShares Core Aggregate") == "low"
    assert infer_bucket_from_text("Equity", "Consumer Staples Select") == "low"
    assert infer_bucket_from_text("Equity", "Emerging Markets ETF") == "high"
    assert infer_bucket_from_text("Equity", "Technology Select Sector SPDR") == "high"
    assert infer_bucket_from_text("Equity", "S&P 500") == "medium"
    assert infer_bucket_from_text(None, None) == "medium"


def test_resolve_bucket_prefers_explicit_label() -> None:
    assert resolve_bucket(UniverseRow(ticker="TLT", name="20+ Year Treasury", asset_class="Bond")) == "low"
    assert resolve_bucket(UniverseRow(ticker="XLU", name="Utilities", risk_bucket="high")) == "high"


def test_portfolio_bucket_uses_largest_weight() -> None:
    buckets = {"A": "low", "B": "low", "C": "high"}
    assert portfolio_bucket({"A": 0.3, "B": 0.3, "C": 0.4}, buckets) == "low"
    assert portfolio_bucket({"A": 0.2, "C": 0.8}, buckets) == "high"
    assert portfolio_bucket({"Z": 1.0}, buckets) == "unknown"
    assert portfolio_bucket({"A": 0.0}, buckets) == "unknown"
    assert portfolio_bucket({"C": 0.5, "A": 0.5}, buckets) == "high"


def test_candidate_kpi_needs_two_finite_points() -> None:
    assert candidate_kpi(SERIES["P4"], CALENDAR) is None
    kpi = candidate_kpi(SERIES["P2"], CALENDAR, indices=[1, 2])
    assert kpi is not None
    assert kpi.total_return == pytest.approx(110 / 105 - 1)


def test_rank_peers_prefers_candidates_beating_reference() -> None:
    reference = compute_kpis(CALENDAR, [100.0, 110.0, 120.0])
    peers = rank_peers(UNIVERSE, ["AAPL"], "SPY", SERIES, CALENDAR, [0, 1, 2], reference, "low")
    assert [peer.ticker for peer in peers] == ["P1"]
    assert peers[0].beats_portfolio is True
    assert peers[0].kpi.total_return == pytest.approx(0.5)


def test_rank_peers_falls_back_to_best_of_the_rest() -> None:
    reference = KPI(total_return=0.9)
    peers = rank_peers(UNIVERSE, ["AAPL"], "SPY", SERIES, CALENDAR, [0, 1, 2], reference, "low")
    assert [peer.ticker for peer in peers] == ["P1", "P2"]
    assert not any(peer.beats_portfolio for peer in peers)
    assert [peer.bucket for peer in peers] == ["medium", "low"]


def test_rank_peers_respects_adjacency_limit_and_window() -> None:
    reference = KPI(total_return=-1.0)
    high = rank_peers(UNIVERSE, ["AAPL"], "SPY", SERIES, CALENDAR, [0, 1, 2], reference, "high")
    assert [peer.ticker for peer in high] == ["P3", "P1"]

    limited = rank_peers(UNIVERSE, ["AAPL"], None, SERIES, CALENDAR, [0, 1, 2], reference, "medium", limit=2)
    assert [peer.ticker for peer in limited] == ["SPY", "P3"]

    windowed = rank_peers(UNIVERSE, ["AAPL", "SPY"], None, SERIES, CALENDAR, [1, 2], reference, "medium")
    assert windowed[0].ticker == "P1"
    assert windowed[0].kpi.total_return == pytest.approx(0.25)
    assert "P4" not in [peer.ticker for peer in windowed]
