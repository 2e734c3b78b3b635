import json
from pathlib import Path

import pytest

DATES = ["2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05"]

SERIES_FILES = {
    "AAPL": {"dates": DATES, "close": [10.0, 11.0, 12.0, 13.0]},
    "MSFT": {"dates": DATES[1:], "close": [20.0, 22.0, 24.0]},
    "SPY": {"dates": DATES, "close": [100.0, 100.0, 100.0, 110.0]},
    "P1": {"dates": DATES, "close": [10.0, 20.0, 30.0, 40.0]},
}

UNIVERSE = [
    {"ticker": "AAPL", "name": "Apple", "assetClass": "Equity", "riskBucket": "medium"},
    {"ticker": "MSFT", "name": "Microsoft", "assetClass": "Equity", "riskBucket": "medium"},
    {"ticker": "SPY", "name": "S&P 500", "assetClass": "Equity", "riskBucket": "medium"},
    {"ticker": "P1", "name": "Peer One", "assetClass": "Equity", "riskBucket": "medium"},
    {"ticker": "P2", "name": "Aggregate Bond", "assetClass": "Bond"},
]


@pytest.fixture
def dataset_dir(tmp_path: Path) -> Path:
    """Static data directory: four daily series, a universe and one benchmark."""
    for ticker, payload in SERIES_FILES.items():
        path = tmp_path / "us" / "daily" / f"{ticker}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"ticker": ticker, **payload}), encoding="utf-8")
    (tmp_path / "universe.json").write_text(json.dumps(UNIVERSE), encoding="utf-8")
    (tmp_path / "benchmarks.json").write_text(
        json.dumps([{"ticker": "SPY", "label": "S&P 500"}, {"ticker": "QQQ", "label": "Nasdaq 100"}]),
        encoding="utf-8",
    )
    return tmp_path
