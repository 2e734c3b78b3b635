import math

import pytest

from basket_server.portfolio.holdings import (
    even_split,
    largest_remainder,
    percents,
    set_percent,
    set_shares,
    set_total,
    sync_selection,
    weights,
)


def test_largest_remainder_ten_split_three_ways() -> None:
    exact = {"MSFT": 10 / 3, "AAPL": 10 / 3, "GOOG": 10 / 3}
    shares = largest_remainder(exact, 10)
    assert shares == {"MSFT": 3, "AAPL": 4, "GOOG": 3}
    assert list(shares) == ["MSFT", "AAPL", "GOOG"]
    assert sum(shares.values()) == 10


def test_largest_remainder_prefers_biggest_fraction() -> None:
    shares = largest_remainder({"A": 1.2, "B": 2.7, "C": 6.1}, 10)
    assert shares == {"A": 1, "B": 3, "C": 6}


def test_set_percent_on_two_equal_holdings() -> None:
    shares = set_percent({"AAPL": 1, "MSFT": 1}, "AAPL", 75)
    assert shares == {"AAPL": 2, "MSFT": 0}
    assert sum(shares.values()) == 2


def test_set_percent_rebalances_others_proportionally() -> None:
    shares = set_percent({"AAPL": 4, "MSFT": 3, "GOOG": 3}, "AAPL", 20)
    # AAPL gets 2, the other 8 split 3:3 between MSFT and GOOG
    assert shares == {"AAPL": 2, "MSFT": 4, "GOOG": 4}


def test_set_percent_splits_evenly_when_others_are_zero() -> None:
    shares = set_percent({"ZZZ": 0, "AAPL": 10, "MSFT": 0}, "AAPL", 50)
    assert shares == {"ZZZ": 2, "AAPL": 5, "MSFT": 3}


def test_set_percent_uses_ceiling_and_clamps() -> None:
    assert set_percent({"A": 5, "B": 5}, "A", 11)["A"] == 2
    assert set_percent({"A": 5, "B": 5}, "A", 150) == {"A": 10, "B": 0}
    assert set_percent({"A": 50, "B": 50}, "A", 7)["A"] == 7


def test_set_percent_round_trip_is_within_granularity() -> None:
    holdings = {"AAPL": 13, "MSFT": 29, "GOOG": 58}
    for target in (0.0, 12.5, 33.3, 50.0, 99.9):
        shares = set_percent(holdings, "MSFT", target)
        total = sum(shares.values())
        assert total == 100
        assert abs(percents(shares)["MSFT"] - target) <= 100 / total


def test_set_percent_single_or_empty_portfolio() -> None:
    assert set_percent({"AAPL": 4}, "AAPL", 10) == {"AAPL": 4}
    assert set_percent({"AAPL": 0, "MSFT": 0}, "AAPL", 40) == {"AAPL": 0, "MSFT": 0}


def test_set_total_preserves_ratios() -> None:
    shares = set_total({"AAPL": 1, "MSFT": 2, "GOOG": 1}, 10)
    assert shares == {"AAPL": 3, "MSFT": 5, "GOOG": 2}
    assert sum(shares.values()) == 10


def test_set_total_from_zero_splits_evenly_by_name() -> None:
    assert set_total({"MSFT": 0, "AAPL": 0, "GOOG": 0}, 8) == {"MSFT": 2, "AAPL": 3, "GOOG": 3}
    assert even_split([], 5) == {}


def test_set_shares_replaces_one_holding() -> None:
    assert set_shares({"AAPL": 1, "MSFT": 1}, "MSFT", 7) == {"AAPL": 1, "MSFT": 7}
    with pytest.raises(ValueError, match="non-negative"):
        set_shares({"AAPL": 1}, "AAPL", -1)
    with pytest.raises(ValueError, match="not part of the holdings"):
        set_shares({"AAPL": 1}, "TSLA", 3)


def test_edit_sequences_conserve_intended_total() -> None:
    holdings = {"AAPL": 3, "MSFT": 7, "GOOG": 1, "AMZN": 0}
    holdings = set_total(holdings, 37)
    assert sum(holdings.values()) == 37
    holdings = set_percent(holdings, "AMZN", 41)
    assert sum(holdings.values()) == 37
    holdings = set_shares(holdings, "GOOG", 12)
    expected = sum(holdings.values())
    holdings = set_percent(holdings, "AAPL", 66.6)
    assert sum(holdings.values()) == expected
    holdings = set_total(holdings, 5)
    assert sum(holdings.values()) == 5
    assert all(shares >= 0 for shares in holdings.values())


def test_sync_selection_resets_when_untouched() -> None:
    assert sync_selection({"AAPL": 1, "MSFT": 1}, ["AAPL", "MSFT", "GOOG"]) == {"AAPL": 1, "MSFT": 1, "GOOG": 1}
    assert sync_selection({}, ["AAPL"]) == {"AAPL": 1}


def test_sync_selection_keeps_user_edits() -> None:
    assert sync_selection({"AAPL": 5, "MSFT": 1}, ["AAPL", "MSFT", "GOOG"]) == {"AAPL": 5, "MSFT": 1, "GOOG": 1}
    assert sync_selection({"AAPL": 5, "MSFT": 2}, ["MSFT"]) == {"MSFT": 2}


def test_percents_and_weights_are_derived() -> None:
    holdings = {"AAPL": 1, "MSFT": 3, "GOOG": 0}
    assert percents(holdings) == {"AAPL": 25.0, "MSFT": 75.0, "GOOG": 0.0}
    assert weights(holdings) == {"AAPL": 0.25, "MSFT": 0.75}
    assert math.isclose(sum(weights(holdings).values()), 1.0)
    assert weights({"AAPL": 0}) == {"AAPL": 0.0}
