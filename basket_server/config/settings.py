"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Runtime settings for local/stdio and HTTP-hosted modes."""

    app_name: str = "basket-analytics"
    app_version: str = "1.0.0"
    transport_mode: str = "auto"
    http_transport: str = "sse"
    host: str = "0.0.0.0"
    port: int = 8000
    mcp_path: str = "/mcp"
    health_path: str = "/health"
    data_dir: str = "data"
    data_base_url: str | None = None
    default_market: str = "us"
    default_frequency: str = "daily"
    default_benchmark: str = "SPY"
    default_range: str = "1Y"
    index_base_value: float = 100.0
    peers_limit: int = 6
    request_timeout_seconds: float = 15.0
    cache_ttl_seconds: int = 3600
    log_level: str = "INFO"
    stooq_user_agent: str = "basket-analytics/1.0"


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _as_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def get_settings() -> Settings:
    """Load runtime settings from environment variables."""
    load_dotenv()

    return Settings(
        transport_mode=os.getenv("TRANSPORT_MODE", "auto").strip().lower(),
        http_transport=os.getenv("HTTP_TRANSPORT", "sse").strip().lower(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int(os.getenv("PORT"), 8000),
        mcp_path=os.getenv("MCP_PATH", "/mcp"),
        health_path=os.getenv("HEALTH_PATH", "/health"),
        data_dir=os.getenv("DATA_DIR", "data"),
        data_base_url=os.getenv("DATA_BASE_URL") or None,
        default_market=os.getenv("DEFAULT_MARKET", "us").strip().lower(),
        default_frequency=os.getenv("DEFAULT_FREQUENCY", "daily").strip().lower(),
        default_benchmark=os.getenv("DEFAULT_BENCHMARK", "SPY").strip().upper(),
        default_range=os.getenv("DEFAULT_RANGE", "1Y").strip().upper(),
        index_base_value=_as_float(os.getenv("INDEX_BASE_VALUE"), 100.0),
        peers_limit=_as_int(os.getenv("PEERS_LIMIT"), 6),
        request_timeout_seconds=_as_float(os.getenv("REQUEST_TIMEOUT_SECONDS"), 15.0),
        cache_ttl_seconds=_as_int(os.getenv("CACHE_TTL_SECONDS"), 3600),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        stooq_user_agent=os.getenv("STOOQ_USER_AGENT", "basket-analytics/1.0"),
    )
