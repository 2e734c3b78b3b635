"""Share-count holdings and the weights derived from them.

Shares are the only stored quantity. Percentages and weights are recomputed
from shares on demand. Every edit returns a new mapping whose share total is
exactly the intended integer total; leftover units from proportional splits
are handed out by the largest-remainder method with ties broken by ascending
ticker name.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

DEFAULT_SHARES = 1


def _check_shares(ticker: str, shares: int) -> int:
    if isinstance(shares, bool) or int(shares) != shares:
        raise ValueError(f"{ticker}: shares must be an integer.")
    if shares < 0:
        raise ValueError(f"{ticker}: shares must be non-negative.")
    return int(shares)


def largest_remainder(exact: Mapping[str, float], total: int) -> dict[str, int]:
    """Round ``exact`` to integers summing to ``total``, keeping input order."""
    floors = {ticker: max(0, math.floor(value)) for ticker, value in exact.items()}
    if not floors:
        return {}
    leftover = total - sum(floors.values())
    by_remainder = sorted(floors, key=lambda ticker: (-round(exact[ticker] - math.floor(exact[ticker]), 12), ticker))
    idx = 0
    while leftover > 0:
        floors[by_remainder[idx % len(by_remainder)]] += 1
        leftover -= 1
        idx += 1
    # float noise can push the floors past the total; take back from the smallest remainders
    for ticker in reversed(by_remainder):
        if leftover >= 0:
            break
        if floors[ticker] > 0:
            floors[ticker] -= 1
            leftover += 1
    return floors


def even_split(tickers: Iterable[str], total: int) -> dict[str, int]:
    """``floor(total / n)`` each, remainder one-by-one in ascending ticker order."""
    names = list(tickers)
    if not names:
        return {}
    base, remainder = divmod(total, len(names))
    bonus = set(sorted(names)[:remainder])
    return {ticker: base + (1 if ticker in bonus else 0) for ticker in names}


def total_shares(holdings: Mapping[str, int]) -> int:
    return sum(holdings.values())


def set_shares(holdings: Mapping[str, int], ticker: str, shares: int) -> dict[str, int]:
    if ticker not in holdings:
        raise ValueError(f"{ticker} is not part of the holdings.")
    output = dict(holdings)
    output[ticker] = _check_shares(ticker, shares)
    return output


def set_percent(holdings: Mapping[str, int], ticker: str, percent: float) -> dict[str, int]:
    """Give ``ticker`` about ``percent`` of the current total and rebalance the rest."""
    if ticker not in holdings:
        raise ValueError(f"{ticker} is not part of the holdings.")
    if not math.isfinite(percent):
        raise ValueError("Percent must be a finite number.")
    total = total_shares(holdings)
    if total == 0:
        return dict(holdings)
    pct = min(100.0, max(0.0, float(percent)))
    others = [name for name in holdings if name != ticker]
    if not others:
        return {ticker: total}

    desired = min(total, math.ceil(round(pct * total / 100.0, 9)))
    remaining = total - desired
    others_total = sum(holdings[name] for name in others)
    if others_total > 0:
        rest = largest_remainder(
            {name: holdings[name] / others_total * remaining for name in others},
            remaining,
        )
    else:
        rest = even_split(others, remaining)

    return {name: desired if name == ticker else rest[name] for name in holdings}


def set_total(holdings: Mapping[str, int], new_total: int) -> dict[str, int]:
    """Scale every holding to ``new_total`` shares, preserving current ratios."""
    target = _check_shares("total", new_total)
    current = total_shares(holdings)
    if current == 0:
        return even_split(holdings, target)
    return largest_remainder({name: shares / current * target for name, shares in holdings.items()}, target)


def sync_selection(holdings: Mapping[str, int], tickers: Iterable[str]) -> dict[str, int]:
    """Follow a change of the selected ticker set.

    Removed tickers are dropped. When a ticker is added while every existing
    holding still sits at the default of one share, all holdings reset to one
    share; otherwise only the newcomer gets the default.
    """
    selected = list(dict.fromkeys(tickers))
    added = [name for name in selected if name not in holdings]
    untouched = all(shares == DEFAULT_SHARES for shares in holdings.values())
    if added and untouched:
        return {name: DEFAULT_SHARES for name in selected}
    return {name: holdings.get(name, DEFAULT_SHARES) for name in selected}


def percents(holdings: Mapping[str, int]) -> dict[str, float]:
    total = total_shares(holdings)
    if total <= 0:
        return {name: 0.0 for name in holdings}
    return {name: shares / total * 100.0 for name, shares in holdings.items()}


def weights(holdings: Mapping[str, int]) -> dict[str, float]:
    """Fractions over tickers with positive shares; all zero when nothing is held."""
    total = total_shares(holdings)
    if total <= 0:
        return {name: 0.0 for name in holdings}
    return {name: shares / total for name, shares in holdings.items() if shares > 0}
