"""
Factory functions for the cached DNS resolver and DNS-cached httpx clients
"""
import time
from typing import Any, Callable, Optional

import httpx

from .config import DnsCacheConfig, load_config_from_env
from .interceptor import DnsCacheTransport, register_interceptor
from .resolution import system_resolve
from .resolver import CachedDnsResolver
from .types import AddressStore, Clock, PlatformResolver


def create_cached_dns_resolver(
    config: Optional[DnsCacheConfig] = None,
    *,
    platform_resolve: PlatformResolver = system_resolve,
    store: Optional[AddressStore] = None,
    clock: Clock = time.time,
) -> CachedDnsResolver:
    """
    Create a resolver service.

    Reads HTTPX_DNS_* environment variables when no config is given.

    Example:
        resolver = create_cached_dns_resolver()
        await resolver.initialize()
    """
    return CachedDnsResolver(
        config or load_config_from_env(),
        platform_resolve=platform_resolve,
        store=store,
        clock=clock,
    )


def compose_transport(
    base: httpx.AsyncBaseTransport,
    *wrappers: Callable[[httpx.AsyncBaseTransport], httpx.AsyncBaseTransport],
) -> httpx.AsyncBaseTransport:
    """
    Compose multiple transport wrappers.

    Example:
        resolver = create_cached_dns_resolver()
        transport = compose_transport(
            httpx.AsyncHTTPTransport(),
            lambda inner: DnsCacheTransport(inner, resolver),
        )
        client = httpx.AsyncClient(transport=transport)
    """
    transport = base
    for wrapper in wrappers:
        transport = wrapper(transport)
    return transport


def create_dns_cached_client(
    resolver: Optional[CachedDnsResolver] = None,
    *,
    use_transport: bool = False,
    proxy: Optional[str] = None,
    base_url: str = "",
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """
    Create an async client whose requests go through the DNS cache.

    By default the cache is attached as a request event hook. With
    use_transport=True it wraps the client's transport instead.

    Example:
        async with create_cached_dns_resolver() as resolver:
            async with create_dns_cached_client(resolver) as client:
                response = await client.get('https://api.example.com/data')
    """
    resolver = resolver or create_cached_dns_resolver()

    if use_transport:
        transport = DnsCacheTransport(httpx.AsyncHTTPTransport(proxy=proxy), resolver)
        return httpx.AsyncClient(transport=transport, base_url=base_url, **client_kwargs)

    client = httpx.AsyncClient(proxy=proxy, base_url=base_url, **client_kwargs)
    register_interceptor(client, resolver)
    return client
