"""
Type definitions for cached_dns_resolve
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass
class LookupAddress:
    """A single record returned by the platform resolver"""

    address: Optional[str]
    """The IP address, or None when the record carries no usable address"""

    family: int = 0
    """Address family (socket.AF_INET / socket.AF_INET6)"""


@dataclass
class AddressEntry:
    """Cached addresses for one hostname"""

    host: str
    """The hostname this entry was resolved from"""

    ips: list[str]
    """Resolved IP addresses, never empty while stored"""

    last_used_at: float
    """When this entry was last read (Unix timestamp)"""

    updated_at: float
    """When this entry was last resolved (Unix timestamp)"""

    next_index: int = 0
    """Round-robin cursor, used modulo len(ips)"""

    def next_address(self, now: float) -> str:
        """Return the address at the cursor, then advance the cursor."""
        ip = self.ips[self.next_index % len(self.ips)]
        self.next_index += 1
        self.last_used_at = max(self.last_used_at, now)
        return ip

    def replace_ips(self, ips: Sequence[str], now: float) -> None:
        """Swap in freshly resolved addresses."""
        if not ips:
            raise ValueError(f"refusing to store empty address list for {self.host!r}")
        self.ips = list(ips)
        self.updated_at = max(self.updated_at, now)

    def is_stale(self, ttl_seconds: float, now: float) -> bool:
        return now >= self.updated_at + ttl_seconds

    def is_idle(self, idle_ttl_seconds: float, now: float) -> bool:
        return now >= self.last_used_at + idle_ttl_seconds

    def copy(self) -> "AddressEntry":
        return AddressEntry(
            host=self.host,
            ips=list(self.ips),
            last_used_at=self.last_used_at,
            updated_at=self.updated_at,
            next_index=self.next_index,
        )


@dataclass
class DnsCacheStats:
    """Counters describing DNS cache activity"""

    hits: int = 0
    """Lookups answered from cache"""

    misses: int = 0
    """Lookups that required a fresh resolution"""

    refreshed: int = 0
    """Entries re-resolved by the background refresher"""

    idle_expired: int = 0
    """Entries deleted by the background refresher for being idle"""

    errors: int = 0
    """Total recorded errors"""

    last_error: Optional[BaseException] = None
    """Most recent recorded error"""

    last_error_ts: Optional[str] = None
    """ISO-8601 timestamp of the most recent recorded error"""

    dns_entries: int = 0
    """Number of live cache entries when the snapshot was taken"""

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "refreshed": self.refreshed,
            "idle_expired": self.idle_expired,
            "errors": self.errors,
            "last_error": repr(self.last_error) if self.last_error else None,
            "last_error_ts": self.last_error_ts,
            "dns_entries": self.dns_entries,
        }


# Platform resolver: hostname -> every address record for that hostname
PlatformResolver = Callable[[str], Awaitable[Sequence[Any]]]

# Clock returning Unix timestamps in seconds
Clock = Callable[[], float]


class AddressStore(ABC):
    """State store interface for cached addresses"""

    @abstractmethod
    def get(self, host: str) -> Optional[AddressEntry]:
        """Get a cached entry"""
        pass

    @abstractmethod
    def set(self, host: str, entry: AddressEntry) -> None:
        """Set a cached entry"""
        pass

    @abstractmethod
    def update(
        self,
        host: str,
        mutate: Callable[[AddressEntry], T],
        create: Optional[Callable[[], AddressEntry]] = None,
    ) -> Optional[T]:
        """Mutate an entry in place and write it back"""
        pass

    @abstractmethod
    def delete(self, host: str, only_if: Optional[Callable[[AddressEntry], bool]] = None) -> bool:
        """Delete a cached entry, optionally only when only_if(entry) holds"""
        pass

    @abstractmethod
    def for_each(self, visit: Callable[[str, AddressEntry], None]) -> None:
        """Visit a copy of every live entry"""
        pass

    @abstractmethod
    def entries(self) -> list[AddressEntry]:
        """Get snapshots of all live entries"""
        pass

    @abstractmethod
    def purge_stale(self) -> int:
        """Remove soft-expired entries"""
        pass

    @abstractmethod
    def size(self) -> int:
        """Get the number of cached entries"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all cached entries"""
        pass
