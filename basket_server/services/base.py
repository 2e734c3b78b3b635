"""Shared service context and input validators."""

from __future__ import annotations

import re
from dataclasses import dataclass

from basket_server.cache.ttl_cache import TTLCache

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9^][A-Z0-9.\-=^]{0,14}$")
MARKET_PATTERN = re.compile(r"^[a-z]{2,8}$")
VALID_FREQUENCIES = {"daily", "intraday"}


@dataclass
class ServiceContext:
    store: object
    cache: TTLCache
    base_value: float = 100.0
    peers_limit: int = 6
    default_market: str = "us"
    default_frequency: str = "daily"
    default_benchmark: str | None = "SPY"
    default_range: str = "1Y"


def validate_symbol(symbol: str) -> str:
    clean = symbol.strip().upper()
    if not clean or not SYMBOL_PATTERN.match(clean):
        raise ValueError("Symbol must be 1-15 chars: A-Z, 0-9, dot, hyphen, caret, equals.")
    return clean


def validate_market(market: str) -> str:
    clean = market.strip().lower()
    if not MARKET_PATTERN.match(clean):
        raise ValueError("Market must be 2-8 lowercase letters.")
    return clean


def validate_frequency(frequency: str) -> str:
    clean = frequency.strip().lower()
    if clean not in VALID_FREQUENCIES:
        raise ValueError("Frequency must be one of: daily, intraday.")
    return clean
