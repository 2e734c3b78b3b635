"""Holdings and series input validation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from basket_server.portfolio.models import RANGE_KEYS, ValidationIssue
from basket_server.services.base import validate_symbol

MAX_TICKERS = 50


def validate_selection(tickers: Sequence[str], shares: Mapping[str, object] | None = None) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not tickers:
        issues.append(ValidationIssue(field="tickers", code="empty_selection", message="Select at least one ticker."))
        return issues
    if len(tickers) > MAX_TICKERS:
        issues.append(
            ValidationIssue(
                field="tickers",
                code="too_many_tickers",
                message=f"At most {MAX_TICKERS} tickers can be combined.",
            )
        )

    seen: set[str] = set()
    for idx, ticker in enumerate(tickers):
        try:
            clean = validate_symbol(str(ticker))
        except ValueError:
            issues.append(
                ValidationIssue(field="tickers", row=idx, code="invalid_symbol", message=f"Invalid ticker: {ticker}")
            )
            continue
        if clean in seen:
            issues.append(
                ValidationIssue(field="tickers", row=idx, code="duplicate_symbol", message=f"Duplicate ticker: {clean}")
            )
        seen.add(clean)

    for ticker, value in (shares or {}).items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not float(value).is_integer():
            issues.append(
                ValidationIssue(field="shares", code="invalid_shares", message=f"{ticker}: shares must be an integer.")
            )
        elif value < 0:
            issues.append(
                ValidationIssue(field="shares", code="negative_shares", message=f"{ticker}: shares must be non-negative.")
            )
    return issues


def validate_range(range_key: str) -> list[ValidationIssue]:
    if range_key.strip().upper() in RANGE_KEYS:
        return []
    return [
        ValidationIssue(
            field="range_key",
            code="invalid_range",
            message=f"Range must be one of: {', '.join(RANGE_KEYS)}.",
        )
    ]


def validate_series_payload(dates: Sequence[str], values: Sequence[float]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if len(dates) != len(values):
        issues.append(
            ValidationIssue(
                field="values",
                code="length_mismatch",
                message=f"dates ({len(dates)}) and values ({len(values)}) must have equal length.",
            )
        )
    for idx, value in enumerate(values):
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            issues.append(ValidationIssue(field="values", row=idx, code="invalid_value", message="Values must be numeric."))
    return issues
