"""
Backend Health Monitor

Tracks whether the two accelerants (Redis cache, Elasticsearch index) can
be used right now. Each backend moves independently through:

    UNPROBED -> AVAILABLE | UNAVAILABLE
    AVAILABLE <-> UNAVAILABLE

Cache state is reactive: it changes when the connection is opened at
startup and whenever a cache call reports a failure. Checking it costs no
network round-trip. Once Redis is marked down, a single bounded PING is
allowed every ``retry_interval`` seconds to bring it back.

The search index has no push channel, so its state is refreshed by a
bounded cluster-health probe on every check. A red cluster, an error or a
timeout all count as unavailable.

Nothing in this module ever raises to the caller: a dead accelerant is
logged and the request carries on against the store.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from enum import StrEnum

from catalog.exceptions import AccelerantDegradedError
from catalog.services.cache import CacheBackend
from catalog.services.elasticsearch import SearchIndex

logger = logging.getLogger(__name__)


class Backend(StrEnum):
    """Accelerants watched by the monitor."""

    CACHE = "cache"
    SEARCH = "search"


class BackendState(StrEnum):
    """Liveness of one accelerant."""

    UNPROBED = "unprobed"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class HealthMonitor:
    """
    Liveness tracker for the cache and the search index.

    Args:
        cache: Cache backend to ping on connect and reconnect
        search_index: Search index to probe for cluster health
        retry_interval: Seconds between reconnect attempts for the cache
        probe_timeout: Upper bound in seconds for one search health probe
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        cache: CacheBackend,
        search_index: SearchIndex,
        retry_interval: float = 30.0,
        probe_timeout: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache = cache
        self._search_index = search_index
        self._retry_interval = retry_interval
        self._probe_timeout = probe_timeout
        self._clock = clock
        self._states: dict[Backend, BackendState] = {
            Backend.CACHE: BackendState.UNPROBED,
            Backend.SEARCH: BackendState.UNPROBED,
        }
        self._unavailable_since: dict[Backend, float] = {}

    # -------------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------------
    def state(self, backend: Backend) -> BackendState:
        return self._states[backend]

    def snapshot(self) -> dict[str, str]:
        """Current state of every backend, for the /health endpoint."""
        return {backend.value: state.value for backend, state in self._states.items()}

    def mark_available(self, backend: Backend) -> None:
        if self._states[backend] != BackendState.AVAILABLE:
            logger.info(f"{backend.value} backend is available")
        self._states[backend] = BackendState.AVAILABLE
        self._unavailable_since.pop(backend, None)

    def mark_unavailable(self, backend: Backend, reason: str | Exception = "") -> None:
        """
        Record that a backend stopped working.

        Called by the coordinator and the search mirror whenever an
        accelerant call fails; this is the monitor's error event channel.
        """
        if self._states[backend] != BackendState.UNAVAILABLE:
            logger.warning(f"{backend.value} backend is unavailable: {reason}")
            self._unavailable_since[backend] = self._clock()
        self._states[backend] = BackendState.UNAVAILABLE

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------
    async def connect(self, backend: Backend) -> bool:
        """
        Open the connection to a backend at process start.

        Failure leaves the backend UNAVAILABLE; the process keeps running.

        Returns:
            True if the backend answered, False otherwise
        """
        if backend == Backend.CACHE:
            return self._probe_cache()
        return await self._probe_search()

    def _probe_cache(self) -> bool:
        try:
            alive = self._cache.ping()
        except AccelerantDegradedError as e:
            self.mark_unavailable(Backend.CACHE, e)
            return False

        if alive:
            self.mark_available(Backend.CACHE)
        else:
            self.mark_unavailable(Backend.CACHE, "ping failed")
        return alive

    async def _probe_search(self) -> bool:
        try:
            health = await asyncio.wait_for(
                self._search_index.cluster_health(),
                timeout=self._probe_timeout,
            )
        except asyncio.TimeoutError:
            self.mark_unavailable(Backend.SEARCH, "health probe timed out")
            return False
        except AccelerantDegradedError as e:
            self.mark_unavailable(Backend.SEARCH, e)
            return False

        status = health.get("status")
        if status in ("green", "yellow"):
            self.mark_available(Backend.SEARCH)
            return True

        self.mark_unavailable(Backend.SEARCH, f"cluster status is {status}")
        return False

    # -------------------------------------------------------------------------
    # Availability checks
    # -------------------------------------------------------------------------
    def cache_available(self) -> bool:
        """
        Can the cache be used right now?

        Returns the last known state without touching the network, except
        for one reconnect PING once the retry interval has elapsed.
        """
        state = self._states[Backend.CACHE]
        if state == BackendState.AVAILABLE:
            return True
        if state == BackendState.UNPROBED:
            return False

        since = self._unavailable_since.get(Backend.CACHE, 0.0)
        if self._clock() - since < self._retry_interval:
            return False

        # Restart the retry window before probing so concurrent callers
        # don't all ping at once.
        self._unavailable_since[Backend.CACHE] = self._clock()
        return self._probe_cache()

    async def search_available(self) -> bool:
        """Can the search index be used right now? Probes on every call."""
        return await self._probe_search()

    async def is_available(self, backend: Backend) -> bool:
        if backend == Backend.CACHE:
            return self.cache_available()
        return await self.search_available()
