"""Application entrypoint for the basket analytics MCP server."""

from __future__ import annotations

import asyncio
import logging
import os

from mcp.server.fastmcp import FastMCP
from starlette.responses import JSONResponse, Response

from basket_server.cache.ttl_cache import TTLCache
from basket_server.config.settings import Settings, get_settings
from basket_server.providers.series_store import SeriesStore
from basket_server.resources.portfolio_resources import register_portfolio_resources
from basket_server.runtime.monitoring import configure_logging
from basket_server.services.base import ServiceContext
from basket_server.tools.registry import ToolServices, build_tool_services, register_all_tools

LOGGER = logging.getLogger(__name__)


def resolve_transport_mode(configured_mode: str) -> str:
    if os.getenv("RENDER") and configured_mode == "stdio":
        return "http"
    if configured_mode in {"stdio", "http"}:
        return configured_mode
    if os.getenv("RENDER") or os.getenv("PORT"):
        return "http"
    return "stdio"


def resolve_http_transport(configured_transport: str) -> str:
    if configured_transport in {"sse", "streamable"}:
        return configured_transport
    return "sse"


def build_services(settings: Settings) -> ToolServices:
    cache = TTLCache(default_ttl_seconds=settings.cache_ttl_seconds)
    store = SeriesStore(
        settings.data_dir,
        cache,
        base_url=settings.data_base_url,
        timeout_seconds=settings.request_timeout_seconds,
    )
    ctx = ServiceContext(
        store=store,
        cache=cache,
        base_value=settings.index_base_value,
        peers_limit=settings.peers_limit,
        default_market=settings.default_market,
        default_frequency=settings.default_frequency,
        default_benchmark=settings.default_benchmark or None,
        default_range=settings.default_range,
    )
    return build_tool_services(ctx)


async def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    mcp = FastMCP(
        name=settings.app_name,
        host=settings.host,
        port=settings.port,
        streamable_http_path=settings.mcp_path,
    )
    services = build_services(settings)
    register_all_tools(mcp, services)
    register_portfolio_resources(mcp, services)
    resolved_mode = resolve_transport_mode(settings.transport_mode)
    resolved_http_transport = resolve_http_transport(settings.http_transport)

    @mcp.custom_route(settings.health_path, methods=["GET"])
    async def health_check(_: object) -> Response:
        tools = await mcp.list_tools()
        return JSONResponse(
            {
                "status": "ok",
                "service": settings.app_name,
                "version": settings.app_version,
                "mode": resolved_mode,
                "tool_count": len(tools),
                "data_source": settings.data_base_url or settings.data_dir,
            }
        )

    LOGGER.info(
        "starting server: mode=%s http_transport=%s data=%s",
        resolved_mode,
        resolved_http_transport,
        settings.data_base_url or settings.data_dir,
    )
    if resolved_mode == "stdio":
        await mcp.run_stdio_async()
    elif resolved_http_transport == "streamable":
        await mcp.run_streamable_http_async()
    else:
        await mcp.run_sse_async()


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
