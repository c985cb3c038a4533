"""
Tribunal - Async Utilities
==========================

Helpers for best-effort async operations whose failure must be logged
but must never abort the caller.

Usage:
    from tribunal.utils.async_utils import safe_async_operation

    await safe_async_operation("Post Notice", channel.send(text))
"""

import asyncio
from typing import Any, Coroutine

from tribunal.core.logger import logger


async def safe_async_operation(
    name: str,
    coro: Coroutine[Any, Any, Any],
    default: Any = None,
    log_level: str = "warning",
) -> Any:
    """
    Run a single async operation with error handling.

    Args:
        name: Name of the operation for logging.
        coro: The coroutine to run.
        default: Value to return if operation fails.
        log_level: Log level for errors ("debug", "warning", "error").

    Returns:
        Result of the coroutine, or default if it fails.
    """
    try:
        return await coro
    except asyncio.CancelledError:
        raise
    except Exception as e:
        error_details = [
            ("Operation", name),
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:100]),
        ]

        if log_level == "debug":
            logger.debug("Async Operation Failed", error_details)
        elif log_level == "error":
            logger.error("Async Operation Failed", error_details)
        else:
            logger.warning("Async Operation Failed", error_details)

        return default


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "safe_async_operation",
]
