#!/usr/bin/env python3
"""
Fixed-delay throttle for polite use of free-tier providers.

Public Nominatim allows roughly one request per second. The throttle keeps
at least `min_interval` seconds between consecutive fresh requests; callers
only go through it for requests that actually hit the network.
"""

import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class FixedDelayThrottle:
    """Enforce a minimum interval between throttled calls."""

    def __init__(self, min_interval, clock=time.monotonic, sleep=asyncio.sleep):
        self.min_interval = float(min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_call = None
        self._lock = asyncio.Lock()

    async def wait(self):
        """Block until the next call is allowed, then record it."""
        async with self._lock:
            if self._last_call is not None:
                remaining = self.min_interval - (self._clock() - self._last_call)
                if remaining > 0:
                    logger.debug(f"Throttling for {remaining:.2f}s")
                    await self._sleep(remaining)
            self._last_call = self._clock()

    def reset(self):
        self._last_call = None
