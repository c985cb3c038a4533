"""
Tribunal - Utilities Package
============================

Shared helpers: TTL cache, interaction responses, async safety wrappers
and rate limiting.
"""

from tribunal.utils.cache import TTLCache
from tribunal.utils.interaction import safe_respond, safe_defer
from tribunal.utils.async_utils import safe_async_operation
from tribunal.utils.rate_limiter import RateLimiter, get_rate_limiter

__all__ = [
    "TTLCache",
    "safe_respond",
    "safe_defer",
    "safe_async_operation",
    "RateLimiter",
    "get_rate_limiter",
]
