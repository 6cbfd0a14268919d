"""
Statistics and error recording for cached_dns_resolve
"""
import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone

from .types import DnsCacheStats

logger = logging.getLogger(__name__)


class StatsRecorder:
    """
    Counters for one resolver instance.

    record_error() is the single place failures are counted and logged.
    """

    def __init__(self) -> None:
        self._stats = DnsCacheStats()
        self._lock = threading.Lock()

    def increment(self, counter: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self._stats, counter, getattr(self._stats, counter) + amount)

    def record_hit(self) -> None:
        self.increment("hits")

    def record_miss(self) -> None:
        self.increment("misses")

    def record_refreshed(self) -> None:
        self.increment("refreshed")

    def record_idle_expired(self) -> None:
        self.increment("idle_expired")

    def record_error(self, err: BaseException, message: str) -> None:
        """Count an error, remember it and log message"""
        with self._lock:
            self._stats.errors += 1
            self._stats.last_error = err
            self._stats.last_error_ts = datetime.now(timezone.utc).isoformat()
        logger.error(message, exc_info=err)

    def snapshot(self, dns_entries: int = 0) -> DnsCacheStats:
        with self._lock:
            return replace(self._stats, dns_entries=dns_entries)

    def reset(self) -> None:
        with self._lock:
            self._stats = DnsCacheStats()
