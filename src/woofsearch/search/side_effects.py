"""Helpers for side effects that must never fail a search."""

import logging
from collections.abc import Awaitable
from typing import Any

logger = logging.getLogger(__name__)


async def run_non_critical(operation: str, awaitable: Awaitable[Any]) -> None:
    """Await a non-critical side effect, logging and swallowing any failure.

    Used for cache writes and analytics appends: the result is discarded and
    nothing propagates to the caller.

    Args:
        operation: Human-readable name for log messages
        awaitable: The side effect to run
    """
    try:
        await awaitable
    except Exception as e:
        logger.warning(f"Non-critical operation '{operation}' failed: {e}", exc_info=True)
