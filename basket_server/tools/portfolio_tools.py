"""Portfolio-domain MCP tools."""

from __future__ import annotations

import json
import time
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Callable

from mcp.server.fastmcp import FastMCP

from basket_server.portfolio.kpi import format_pct
from basket_server.portfolio.models import ValidationIssue
from basket_server.portfolio.portfolio_service import report_payload
from basket_server.portfolio.validation import validate_range, validate_selection, validate_series_payload
from basket_server.runtime.monitoring import log_tool_event

if TYPE_CHECKING:
    from basket_server.tools.registry import ToolServices

STALE_MESSAGE = "A newer request superseded this one."


def _json_validation_error(issues: list[ValidationIssue]) -> dict[str, Any]:
    return {"ok": False, "error": {"type": "validation_error", "errors": [asdict(issue) for issue in issues]}}


def _respond(tool: str, tickers: list[str] | None, call: Callable[[], dict[str, Any]]) -> str:
    started = time.perf_counter()
    success = False
    try:
        payload = call()
        success = bool(payload.get("ok"))
    except ValueError as error:
        payload = _json_validation_error([ValidationIssue(field="arguments", code="invalid_argument", message=str(error))])
    finally:
        log_tool_event(tool, tickers, (time.perf_counter() - started) * 1000.0, success)
    return json.dumps(payload, ensure_ascii=True)


def register_portfolio_tools(mcp: FastMCP, services: ToolServices) -> None:
    def _refresh(
        tickers: list[str],
        shares: dict[str, int] | None,
        range_key: str | None,
        benchmark: str | None,
        market: str | None,
        frequency: str | None,
    ) -> tuple[dict[str, Any] | None, Any]:
        key = range_key or services.portfolio.ctx.default_range
        issues = validate_selection(tickers, shares) + validate_range(key)
        if issues:
            return _json_validation_error(issues), None
        report = services.portfolio.refresh(tickers, shares or {}, key, benchmark, market, frequency)
        if report is None:
            return {"ok": False, "error": {"type": "stale", "message": STALE_MESSAGE}}, None
        return None, report

    @mcp.tool(description="Compute the weighted portfolio index, KPIs, benchmark comparison and peers.")
    def compute_portfolio(
        tickers: list[str],
        shares: dict[str, int] | None = None,
        range_key: str | None = None,
        benchmark: str | None = None,
        market: str | None = None,
        frequency: str | None = None,
    ) -> str:
        def _call() -> dict[str, Any]:
            error, report = _refresh(tickers, shares, range_key, benchmark, market, frequency)
            if error is not None:
                return error
            return {"ok": True, **report_payload(report)}

        return _respond("compute_portfolio", tickers, _call)

    @mcp.tool(
        description=(
            "Reconcile integer share holdings. operation is one of set_shares, set_percent, "
            "set_total, sync_selection."
        )
    )
    def reconcile_holdings(
        shares: dict[str, int],
        operation: str,
        ticker: str | None = None,
        value: float | None = None,
        tickers: list[str] | None = None,
    ) -> str:
        def _call() -> dict[str, Any]:
            issues = validate_selection(list(shares), shares) if shares else []
            if issues:
                return _json_validation_error(issues)
            updated = services.portfolio.reconcile(shares, operation, ticker=ticker, value=value, tickers=tickers)
            total = sum(updated.values())
            return {
                "ok": True,
                "shares": updated,
                "total": total,
                "percents": {name: (count / total * 100.0 if total else 0.0) for name, count in updated.items()},
            }

        return _respond("reconcile_holdings", list(shares), _call)

    @mcp.tool(description="Compute total return, CAGR and max drawdown for a dated value series.")
    def compute_series_kpis(dates: list[str], values: list[float | None]) -> str:
        def _call() -> dict[str, Any]:
            issues = validate_series_payload(dates, values)
            if issues:
                return _json_validation_error(issues)
            kpi = services.portfolio.series_kpis(dates, values)
            return {
                "ok": True,
                "kpi": asdict(kpi),
                "formatted": {name: format_pct(value) for name, value in asdict(kpi).items()},
            }

        return _respond("compute_series_kpis", None, _call)

    @mcp.tool(description="Rank similar-risk tickers outside the portfolio by return over the same window.")
    def rank_similar_risk_peers(
        tickers: list[str],
        shares: dict[str, int] | None = None,
        range_key: str | None = None,
        benchmark: str | None = None,
        market: str | None = None,
        frequency: str | None = None,
    ) -> str:
        def _call() -> dict[str, Any]:
            error, report = _refresh(tickers, shares, range_key, benchmark, market, frequency)
            if error is not None:
                return error
            payload = report_payload(report)
            return {
                "ok": True,
                "risk_bucket": payload["risk_bucket"],
                "portfolio_kpi": payload["kpi"],
                "peers": payload["peers"],
            }

        return _respond("rank_similar_risk_peers", tickers, _call)

    @mcp.tool(description="List tickers eligible as comparison benchmarks.")
    def list_benchmarks() -> str:
        def _call() -> dict[str, Any]:
            rows = services.store.load_benchmarks()
            return {"ok": True, "benchmarks": [asdict(row) for row in rows]}

        return _respond("list_benchmarks", None, _call)
