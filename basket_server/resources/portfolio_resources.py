"""Portfolio resource definitions."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

if TYPE_CHECKING:
    from basket_server.tools.registry import ToolServices

CURRENT_PORTFOLIO_URI = "portfolio://current"


def register_portfolio_resources(mcp: FastMCP, services: "ToolServices") -> None:
    @mcp.resource(
        CURRENT_PORTFOLIO_URI,
        name="current-portfolio",
        title="Current Portfolio Snapshot",
        description="Latest computed portfolio report (index, KPIs, benchmark and peers).",
        mime_type="application/json",
    )
    def current_portfolio_resource() -> str:
        snapshot = services.portfolio.get_current_resource_snapshot()
        if not snapshot:
            raise ValueError("Portfolio resource not found. Run compute_portfolio first.")
        return json.dumps(snapshot, ensure_ascii=True)
