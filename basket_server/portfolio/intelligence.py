"""Plain-text summary of a portfolio report."""

from __future__ import annotations

from basket_server.portfolio.kpi import format_pct
from basket_server.portfolio.models import PortfolioReport


def generate_summary(report: PortfolioReport) -> str:
    if not report.has_index:
        missing = f" Missing price data: {', '.join(report.missing_tickers)}." if report.missing_tickers else ""
        return f"Not enough data to compute the portfolio over {report.range_key}.{missing}"

    kpi = report.kpi
    parts = [
        f"Portfolio returned {format_pct(kpi.total_return)} over {report.range_key} "
        f"(CAGR {format_pct(kpi.cagr)}, max drawdown {format_pct(kpi.max_drawdown)}).",
        f"Risk bucket: {report.risk_bucket}.",
    ]
    if report.benchmark is not None:
        verb = "ahead of" if report.benchmark.excess_return >= 0 else "behind"
        parts.append(
            f"{format_pct(abs(report.benchmark.excess_return))} {verb} {report.benchmark.label} "
            f"({format_pct(report.benchmark.kpi.total_return)})."
        )
    if report.peers:
        leaders = ", ".join(f"{peer.ticker} {format_pct(peer.kpi.total_return)}" for peer in report.peers[:3])
        parts.append(f"Similar-risk leaders: {leaders}.")
    if report.missing_tickers:
        parts.append(f"Excluded for missing data: {', '.join(report.missing_tickers)}.")
    return " ".join(parts)
