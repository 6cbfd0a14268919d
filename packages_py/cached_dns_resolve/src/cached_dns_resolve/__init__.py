"""
Transparent DNS resolution cache for outbound httpx requests, with
round-robin addresses, background refresh and idle eviction.
"""
from .types import (
    AddressEntry,
    LookupAddress,
    DnsCacheStats,
    PlatformResolver,
    AddressStore,
)
from .errors import (
    CachedDnsError,
    ResolutionError,
    RequestRewriteError,
)
from .config import (
    DnsCacheConfig,
    DEFAULT_DNS_CACHE_CONFIG,
    load_config_from_env,
    validate_config,
    is_ip_address,
)
from .resolution import system_resolve, extract_addresses, resolve_addresses
from .stores import MemoryAddressStore, create_memory_store
from .stats import StatsRecorder
from .scheduler import PeriodicTask
from .refresher import BackgroundRefresher
from .resolver import CachedDnsResolver
from .interceptor import (
    rewrite_request,
    register_interceptor,
    RequestRewriteHook,
    DnsCacheTransport,
)
from .factory import (
    create_cached_dns_resolver,
    create_dns_cached_client,
    compose_transport,
)


__all__ = [
    # Types
    "AddressEntry",
    "LookupAddress",
    "DnsCacheStats",
    "PlatformResolver",
    "AddressStore",
    # Errors
    "CachedDnsError",
    "ResolutionError",
    "RequestRewriteError",
    # Config
    "DnsCacheConfig",
    "DEFAULT_DNS_CACHE_CONFIG",
    "load_config_from_env",
    "validate_config",
    "is_ip_address",
    # Resolution
    "system_resolve",
    "extract_addresses",
    "resolve_addresses",
    # Stores
    "MemoryAddressStore",
    "create_memory_store",
    # Service
    "StatsRecorder",
    "PeriodicTask",
    "BackgroundRefresher",
    "CachedDnsResolver",
    # httpx integration
    "rewrite_request",
    "register_interceptor",
    "RequestRewriteHook",
    "DnsCacheTransport",
    "create_cached_dns_resolver",
    "create_dns_cached_client",
    "compose_transport",
]


__version__ = "1.0.0"
