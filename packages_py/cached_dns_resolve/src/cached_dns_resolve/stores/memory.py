"""
In-memory address store implementation
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from ..types import AddressEntry, AddressStore, Clock, T

logger = logging.getLogger(__name__)


class MemoryAddressStore(AddressStore):
    """
    Thread-safe in-memory address store with LRU eviction and soft expiry.

    Every read or write touches an entry. Entries not touched within
    expire_after_seconds are treated as absent and dropped by purge_stale().

    Example:
        store = MemoryAddressStore(max_entries=100, expire_after_seconds=10.0)
        store.set("api.example.com", entry)
        ip = store.update("api.example.com", lambda e: e.next_address(time.time()))
    """

    def __init__(
        self,
        max_entries: int = 100,
        expire_after_seconds: Optional[float] = None,
        clock: Clock = time.time,
    ) -> None:
        # host -> (entry, last touch), least recently touched first
        self._cache: "OrderedDict[str, tuple[AddressEntry, float]]" = OrderedDict()
        self._max_entries = max_entries
        self._expire_after = expire_after_seconds
        self._clock = clock
        self._lock = threading.Lock()

    def _is_expired(self, touched_at: float, now: float) -> bool:
        return self._expire_after is not None and now - touched_at >= self._expire_after

    def _live(self, host: str, now: float) -> Optional[AddressEntry]:
        slot = self._cache.get(host)
        if slot is None:
            return None
        entry, touched_at = slot
        if self._is_expired(touched_at, now):
            del self._cache[host]
            logger.debug(f"MemoryAddressStore: dropped expired entry host={host!r}")
            return None
        return entry

    def _touch(self, host: str, entry: AddressEntry, now: float) -> None:
        self._cache[host] = (entry, now)
        self._cache.move_to_end(host)

    def _insert(self, host: str, entry: AddressEntry, now: float) -> None:
        if not entry.ips:
            raise ValueError(f"refusing to store empty address list for {host!r}")
        if host not in self._cache:
            while len(self._cache) >= self._max_entries:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"MemoryAddressStore: evicted least recently used host={evicted!r}")
        self._touch(host, entry, now)

    def get(self, host: str) -> Optional[AddressEntry]:
        """Get a cached entry"""
        with self._lock:
            now = self._clock()
            entry = self._live(host, now)
            if entry is not None:
                self._touch(host, entry, now)
            return entry

    def set(self, host: str, entry: AddressEntry) -> None:
        """Set a cached entry"""
        with self._lock:
            self._insert(host, entry, self._clock())

    def update(
        self,
        host: str,
        mutate: Callable[[AddressEntry], T],
        create: Optional[Callable[[], AddressEntry]] = None,
    ) -> Optional[T]:
        """
        Apply mutate to the entry for host and write it back.

        When the host is absent and create is given, the created entry is
        inserted first. Returns None when the host is absent otherwise.
        """
        with self._lock:
            now = self._clock()
            entry = self._live(host, now)
            if entry is None:
                if create is None:
                    return None
                entry = create()
                self._insert(host, entry, now)
            result = mutate(entry)
            self._touch(host, entry, now)
            return result

    def delete(self, host: str, only_if: Optional[Callable[[AddressEntry], bool]] = None) -> bool:
        """
        Delete a cached entry.

        When only_if is given the entry is deleted only if it returns True,
        checked under the same lock as the removal.
        """
        with self._lock:
            slot = self._cache.get(host)
            if slot is None:
                return False
            if only_if is not None and not only_if(slot[0]):
                return False
            del self._cache[host]
            return True

    def has(self, host: str) -> bool:
        """Check if an entry exists"""
        with self._lock:
            return self._live(host, self._clock()) is not None

    def keys(self) -> list[str]:
        """Get all live keys, least recently touched first"""
        with self._lock:
            now = self._clock()
            return [host for host, (_, touched_at) in self._cache.items() if not self._is_expired(touched_at, now)]

    def for_each(self, visit: Callable[[str, AddressEntry], None]) -> None:
        """
        Visit a copy of every live entry.

        Iterates a snapshot of the keys so visit may call back into the store.
        """
        for host in self.keys():
            with self._lock:
                entry = self._live(host, self._clock())
                snapshot = entry.copy() if entry is not None else None
            if snapshot is not None:
                visit(host, snapshot)

    def entries(self) -> list[AddressEntry]:
        """Get copies of all live entries"""
        with self._lock:
            now = self._clock()
            return [
                entry.copy()
                for entry, touched_at in self._cache.values()
                if not self._is_expired(touched_at, now)
            ]

    def purge_stale(self) -> int:
        """Remove all soft-expired entries"""
        with self._lock:
            now = self._clock()
            stale = [host for host, (_, touched_at) in self._cache.items() if self._is_expired(touched_at, now)]
            for host in stale:
                del self._cache[host]
        if stale:
            logger.debug(f"MemoryAddressStore.purge_stale: removed={len(stale)}")
        return len(stale)

    def size(self) -> int:
        """Get the number of live cached entries"""
        with self._lock:
            now = self._clock()
            return sum(1 for _, touched_at in self._cache.values() if not self._is_expired(touched_at, now))

    def clear(self) -> None:
        """Clear all cached entries"""
        with self._lock:
            self._cache.clear()


def create_memory_store(
    max_entries: int = 100,
    expire_after_seconds: Optional[float] = None,
    clock: Clock = time.time,
) -> MemoryAddressStore:
    """Create a memory store instance"""
    return MemoryAddressStore(max_entries, expire_after_seconds, clock)
