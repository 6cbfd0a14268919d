"""
Background refresh of cached addresses.

Each sweep re-resolves entries whose addresses are older than the TTL and
deletes entries nobody has read within the idle TTL.
"""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from .config import DnsCacheConfig
from .stats import StatsRecorder
from .types import AddressEntry, AddressStore, Clock

logger = logging.getLogger(__name__)

AddressResolver = Callable[[str], Awaitable[list[str]]]


class BackgroundRefresher:
    """
    Sweeps an address store, refreshing stale entries and evicting idle ones.

    Only one sweep runs at a time. Refreshes inside a sweep run concurrently,
    at most config.max_concurrent_refreshes at once, and a failure on one
    host never stops the others.

    Example:
        refresher = BackgroundRefresher(store, config, stats, resolve)
        await refresher.run_sweep()
    """

    def __init__(
        self,
        store: AddressStore,
        config: DnsCacheConfig,
        stats: StatsRecorder,
        resolve: AddressResolver,
        clock: Clock = time.time,
    ) -> None:
        self._store = store
        self._config = config
        self._stats = stats
        self._resolve = resolve
        self._clock = clock
        self._semaphore = asyncio.Semaphore(config.max_concurrent_refreshes)
        self._sweeping = False
        self._refreshing: set[str] = set()
        self._sweep_tasks: set[asyncio.Task] = set()

    @property
    def sweeping(self) -> bool:
        """Whether a sweep is in flight"""
        return self._sweeping

    def trigger(self) -> Optional[asyncio.Task]:
        """
        Start a sweep in its own task unless one is already running.

        Used as the periodic callback so that stopping the timer never
        cancels resolutions that are already in flight.
        """
        if self._sweeping:
            logger.debug("trigger: previous sweep still running, skipping")
            return None
        task = asyncio.get_running_loop().create_task(self.run_sweep())
        self._sweep_tasks.add(task)
        task.add_done_callback(self._sweep_tasks.discard)
        return task

    async def run_sweep(self) -> bool:
        """
        Run one pass over every cached entry.

        Returns:
            False if another sweep was already running, True otherwise.
        """
        if self._sweeping:
            return False
        self._sweeping = True
        try:
            due = self._collect_due()
            if due:
                await asyncio.gather(*(self._refresh_entry(host) for host in due))
        except Exception as err:
            self._stats.record_error(err, f"run_sweep: background refresh failed, {err}")
        finally:
            self._sweeping = False
        return True

    def _collect_due(self) -> list[str]:
        """Delete idle entries and return the hosts that need re-resolving"""
        now = self._clock()
        ttl = self._config.ttl_seconds
        idle_ttl = self._config.idle_ttl_seconds
        due: list[str] = []

        def visit(host: str, entry: AddressEntry) -> None:
            if not entry.is_stale(ttl, now):
                return
            if entry.is_idle(idle_ttl, now):
                # Re-checked under the store lock in case a reader touched it meanwhile
                if self._store.delete(host, only_if=lambda current: current.is_idle(idle_ttl, now)):
                    self._stats.record_idle_expired()
                    logger.debug(f"run_sweep: idle entry expired host={host!r}")
                return
            due.append(host)

        self._store.for_each(visit)
        return due

    async def _refresh_entry(self, host: str) -> None:
        if host in self._refreshing:
            return
        self._refreshing.add(host)
        try:
            async with self._semaphore:
                ips = await self._resolve(host)
            now = self._clock()

            def apply(entry: AddressEntry) -> bool:
                entry.replace_ips(ips, now)
                return True

            if self._store.update(host, apply):
                self._stats.record_refreshed()
                logger.debug(f"_refresh_entry: refreshed host={host!r}, ips={ips!r}")
            else:
                logger.debug(f"_refresh_entry: entry removed during refresh host={host!r}")
        except Exception as err:
            self._stats.record_error(err, f"_refresh_entry: background refresh failed host={host!r}, {err}")
        finally:
            self._refreshing.discard(host)

    async def wait_idle(self) -> None:
        """Wait for sweeps started by trigger() to finish"""
        if self._sweep_tasks:
            await asyncio.gather(*list(self._sweep_tasks), return_exceptions=True)
