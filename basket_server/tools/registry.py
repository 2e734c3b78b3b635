"""Tool service wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from mcp.server.fastmcp import FastMCP

from basket_server.portfolio.portfolio_service import PortfolioService
from basket_server.providers.series_store import SeriesStore
from basket_server.services.base import ServiceContext
from basket_server.tools.portfolio_tools import register_portfolio_tools


@dataclass
class ToolServices:
    portfolio: PortfolioService
    store: SeriesStore


def build_tool_services(
    ctx: ServiceContext,
    portfolio_resource_updated_callback: Callable[[str], None] | None = None,
) -> ToolServices:
    return ToolServices(
        portfolio=PortfolioService(ctx, resource_updated_callback=portfolio_resource_updated_callback),
        store=ctx.store,  # type: ignore[arg-type]
    )


def register_all_tools(mcp: FastMCP, services: ToolServices) -> None:
    register_portfolio_tools(mcp, services)
