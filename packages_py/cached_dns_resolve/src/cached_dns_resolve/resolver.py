"""
Cached DNS Resolver - Main implementation
"""
import asyncio
import logging
import time
from typing import Any, Optional

from .config import DnsCacheConfig, validate_config
from .interceptor import register_interceptor as _register_interceptor
from .refresher import BackgroundRefresher
from .resolution import resolve_addresses, system_resolve
from .scheduler import PeriodicTask
from .stats import StatsRecorder
from .stores.memory import MemoryAddressStore
from .types import AddressEntry, AddressStore, Clock, DnsCacheStats, PlatformResolver

logger = logging.getLogger(__name__)


class CachedDnsResolver:
    """
    Cached DNS Resolver

    Resolves hostnames through an in-memory cache with:
    - Round-robin selection across every resolved address
    - Background refresh of stale entries that are still in use
    - Idle eviction and LRU capacity eviction
    - Hit/miss/error statistics

    Example:
        resolver = CachedDnsResolver(DnsCacheConfig(ttl_seconds=5.0))
        await resolver.initialize()

        ip = await resolver.get_address('api.example.com')

        await resolver.shutdown()
    """

    def __init__(
        self,
        config: Optional[DnsCacheConfig] = None,
        *,
        platform_resolve: PlatformResolver = system_resolve,
        store: Optional[AddressStore] = None,
        clock: Clock = time.time,
    ) -> None:
        self._config = validate_config(config or DnsCacheConfig())
        self._platform_resolve = platform_resolve
        self._clock = clock
        self._store = store or MemoryAddressStore(
            max_entries=self._config.max_entries,
            expire_after_seconds=self._config.cache_expire_seconds,
            clock=clock,
        )
        self._stats = StatsRecorder()
        self._pending: dict[str, asyncio.Task] = {}

        self._refresher = BackgroundRefresher(
            self._store,
            self._config,
            self._stats,
            self._resolve,
            clock=clock,
        )
        self._refresh_task = PeriodicTask(
            "background-refresh",
            self._config.background_scan_seconds,
            self._trigger_refresh,
            on_error=self._on_timer_error,
        )
        self._prune_task = PeriodicTask(
            "idle-prune",
            self._config.idle_ttl_seconds,
            self._store.purge_stale,
            on_error=self._on_timer_error,
        )

    @property
    def config(self) -> DnsCacheConfig:
        return self._config

    @property
    def disabled(self) -> bool:
        return self._config.disabled

    @property
    def stats(self) -> StatsRecorder:
        """Stats recorder shared with the refresher and interceptor"""
        return self._stats

    @property
    def store(self) -> AddressStore:
        return self._store

    @property
    def refresher(self) -> BackgroundRefresher:
        return self._refresher

    @property
    def running(self) -> bool:
        return self._refresh_task.running or self._prune_task.running

    async def initialize(self) -> None:
        """Start the background refresh and idle prune timers (idempotent)"""
        started_refresh = self._refresh_task.start()
        started_prune = self._prune_task.start()
        if started_refresh or started_prune:
            logger.debug(
                f"initialize: background_scan_seconds={self._config.background_scan_seconds}, "
                f"idle_ttl_seconds={self._config.idle_ttl_seconds}"
            )

    async def shutdown(self) -> None:
        """Stop both timers. In-flight resolutions finish on their own."""
        await self._refresh_task.stop()
        await self._prune_task.stop()
        logger.debug("shutdown: timers stopped")

    async def __aenter__(self) -> "CachedDnsResolver":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()

    async def _resolve(self, host: str) -> list[str]:
        return await resolve_addresses(host, self._platform_resolve)

    async def _resolve_shared(self, host: str) -> list[str]:
        """Resolve host, joining a lookup already in flight for it"""
        task = self._pending.get(host)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._resolve(host))
            self._pending[host] = task
            task.add_done_callback(lambda done: self._lookup_done(host, done))
        # A cancelled caller leaves the lookup running for the next miss
        return list(await asyncio.shield(task))

    def _lookup_done(self, host: str, task: asyncio.Task) -> None:
        if self._pending.get(host) is task:
            del self._pending[host]
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"_lookup_done: lookup failed host={host!r}, {task.exception()}")

    async def get_address(self, host: str) -> str:
        """
        Return the next IP address for host.

        Cached entries are served round-robin. On a miss the host is resolved,
        cached and its first address returned.

        Raises:
            ResolutionError: The host could not be resolved.
        """
        ip = self._store.update(host, lambda entry: entry.next_address(self._clock()))
        if ip is not None:
            self._stats.record_hit()
            return ip

        self._stats.record_miss()
        logger.debug(f"get_address: cache miss host={host!r}")

        ips = await self._resolve_shared(host)
        now = self._clock()

        def create() -> AddressEntry:
            return AddressEntry(host=host, ips=ips, last_used_at=now, updated_at=now)

        # Another miss for the same host may have inserted the entry already
        return self._store.update(host, lambda entry: entry.next_address(now), create=create)

    async def resolve_address(self, host: str) -> str:
        """Alias of get_address for callers outside the interceptor"""
        return await self.get_address(host)

    async def run_background_refresh(self) -> bool:
        """Run one refresh sweep now. Returns False if one was already running."""
        return await self._refresher.run_sweep()

    def purge_stale(self) -> int:
        """Drop soft-expired entries from the store"""
        return self._store.purge_stale()

    def get_stats(self) -> DnsCacheStats:
        """Get a snapshot of the counters plus the live entry count"""
        return self._stats.snapshot(dns_entries=self._store.size())

    def reset_stats(self) -> None:
        self._stats.reset()

    def list_cached_entries(self) -> list[AddressEntry]:
        """Get copies of every cached entry"""
        return self._store.entries()

    def record_error(self, err: BaseException, message: str) -> None:
        self._stats.record_error(err, message)

    def _trigger_refresh(self) -> None:
        # The sweep runs in its own task so stopping the timer leaves it alone
        self._refresher.trigger()

    def _on_timer_error(self, err: BaseException) -> None:
        self._stats.record_error(err, f"PeriodicTask: timer callback failed, {err}")

    def register_interceptor(self, client: Any) -> bool:
        """Attach the request rewriting hook to an httpx.AsyncClient"""
        return _register_interceptor(client, self)
