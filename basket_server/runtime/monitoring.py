"""Logging setup and structured tool-event logging."""

from __future__ import annotations

import json
import logging
import sys
import time

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Root logger on stderr; unknown level names fall back to INFO."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def log_tool_event(
    tool: str,
    tickers: list[str] | None,
    latency_ms: float,
    success: bool,
    warning: str | None = None,
) -> None:
    payload: dict[str, object] = {
        "tool": tool,
        "tickers": tickers or [],
        "latency_ms": round(latency_ms, 3),
        "success": success,
        "timestamp": int(time.time()),
    }
    if latency_ms > 2000 and not warning:
        warning = "slow_response"
    if warning:
        payload["warning"] = warning
    LOGGER.info(json.dumps(payload, ensure_ascii=True))
