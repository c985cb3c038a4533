"""
Tribunal - Rate Limiter
=======================

Named token buckets for pacing Discord API calls.

DESIGN:
    Token bucket algorithm with per-bucket configuration. The
    auto-resolution sweep acquires from "escalation_sweep" before each
    escalation so a large backlog is worked through at a steady pace
    instead of bursting into 429s.

Usage:
    rate_limiter = get_rate_limiter()

    await rate_limiter.acquire("escalation_sweep")

    async with rate_limiter.limit("send_message"):
        await channel.send(...)
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, AsyncIterator
from contextlib import asynccontextmanager

from tribunal.core.logger import logger


# =============================================================================
# Bucket Configuration
# =============================================================================

@dataclass
class BucketConfig:
    """Configuration for a rate limit bucket."""

    rate: float  # Operations per second
    burst: int = 1  # Max burst size
    name: str = ""  # For logging

    @property
    def interval(self) -> float:
        """Minimum interval between operations."""
        return 1.0 / self.rate if self.rate > 0 else 0


BUCKETS: Dict[str, BucketConfig] = {
    "send_message": BucketConfig(rate=2.0, burst=5, name="Send Message"),
    "escalation_sweep": BucketConfig(rate=1.0, burst=2, name="Escalation Sweep"),
}


# =============================================================================
# Token Bucket Implementation
# =============================================================================

@dataclass
class TokenBucket:
    """Token bucket for rate limiting."""

    config: BucketConfig
    tokens: float = field(default=0, init=False)
    last_update: float = field(default_factory=time.monotonic, init=False)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self):
        self.tokens = float(self.config.burst)

    async def acquire(self, tokens: int = 1) -> float:
        """
        Acquire tokens, waiting if necessary.

        Returns:
            Time waited in seconds.
        """
        async with self.lock:
            now = time.monotonic()

            elapsed = now - self.last_update
            self.tokens = min(
                self.config.burst,
                self.tokens + elapsed * self.config.rate
            )
            self.last_update = now

            wait_time = 0.0
            if self.tokens < tokens:
                deficit = tokens - self.tokens
                wait_time = deficit / self.config.rate
                await asyncio.sleep(wait_time)
                self.tokens = 0
                self.last_update = time.monotonic()
            else:
                self.tokens -= tokens

            return wait_time


# =============================================================================
# Rate Limiter Service
# =============================================================================

class RateLimiter:
    """
    Rate limiter with named buckets.

    DESIGN:
        One instance per process (see get_rate_limiter()).
        Each bucket tracks its own token count independently.
    """

    def __init__(self, buckets: Optional[Dict[str, BucketConfig]] = None):
        configs = buckets if buckets is not None else BUCKETS
        self._buckets: Dict[str, TokenBucket] = {
            name: TokenBucket(config) for name, config in configs.items()
        }

        logger.tree("Rate Limiter Initialized", [
            ("Buckets", ", ".join(configs) or "none"),
        ], emoji="🚦")

    def _get_bucket(self, name: str) -> TokenBucket:
        """Get or create a bucket by name."""
        if name not in self._buckets:
            self._buckets[name] = TokenBucket(BucketConfig(rate=1.0, burst=1, name=name))
        return self._buckets[name]

    async def acquire(self, bucket: str, tokens: int = 1) -> float:
        """
        Acquire tokens from a bucket, waiting if necessary.

        Returns:
            Time waited in seconds.
        """
        b = self._get_bucket(bucket)
        wait_time = await b.acquire(tokens)

        if wait_time > 0.1:
            logger.debug(f"Rate limit wait: {b.config.name} ({wait_time:.2f}s)")

        return wait_time

    @asynccontextmanager
    async def limit(self, bucket: str, tokens: int = 1) -> AsyncIterator[None]:
        """Context manager form of acquire()."""
        await self.acquire(bucket, tokens)
        yield


# =============================================================================
# Global Instance
# =============================================================================

_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get the global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


__all__ = [
    "RateLimiter",
    "TokenBucket",
    "BucketConfig",
    "BUCKETS",
    "get_rate_limiter",
]
