"""
httpx integration: rewrite outgoing requests to cached IP addresses.

Two attachment points share rewrite_request():
- register_interceptor() adds a request event hook to an httpx.AsyncClient
- DnsCacheTransport wraps another transport (compose pattern)
"""
import logging
from typing import TYPE_CHECKING, Any

import httpx

from .config import is_ip_address
from .errors import RequestRewriteError

if TYPE_CHECKING:
    from .resolver import CachedDnsResolver

logger = logging.getLogger(__name__)


async def rewrite_request(request: httpx.Request, resolver: "CachedDnsResolver") -> httpx.Request:
    """
    Point a request at a cached IP address for its host.

    The Host header keeps the original host and the sni_hostname extension
    carries it to TLS. Literal IP hosts are left alone. On any failure the
    error is recorded and the request is returned unmodified.

    Args:
        request: The outgoing request. Mutated in place on success.
        resolver: The resolver service to look the host up in.

    Returns:
        The same request object.
    """
    if resolver.disabled:
        return request

    try:
        host = request.url.host
        if not host:
            raise RequestRewriteError(f"request URL has no host: {request.url}")
        if is_ip_address(host):
            return request

        ip = await resolver.get_address(host)
        try:
            resolved_url = request.url.copy_with(host=ip)
        except httpx.InvalidURL as err:
            raise RequestRewriteError(f"cannot use address {ip!r} for host {host!r}: {err}") from err
    except Exception as err:
        resolver.record_error(err, f"rewrite_request: error getting address for {request.url}, {err}")
        return request

    # httpx fills Host from the URL (with any explicit port) when the request is built
    if "host" not in request.headers:
        request.headers["Host"] = request.url.netloc.decode("ascii")
    request.extensions = {**request.extensions, "sni_hostname": host}
    request.url = resolved_url
    logger.debug(f"rewrite_request: host={host!r} -> ip={ip!r}")
    return request


class RequestRewriteHook:
    """Async request event hook bound to one resolver"""

    def __init__(self, resolver: "CachedDnsResolver") -> None:
        self.resolver = resolver

    async def __call__(self, request: httpx.Request) -> None:
        await rewrite_request(request, self.resolver)


def register_interceptor(client: Any, resolver: "CachedDnsResolver") -> bool:
    """
    Attach the rewrite hook to an httpx.AsyncClient.

    Returns:
        True if the hook was attached, False if the resolver is disabled,
        the client cannot take async hooks, or the hook is already there.
    """
    if resolver.disabled:
        logger.debug("register_interceptor: DNS cache disabled, not registering")
        return False
    if client is None or not isinstance(client, httpx.AsyncClient):
        logger.debug(f"register_interceptor: unsupported client type={type(client).__name__}")
        return False

    hooks = client.event_hooks
    request_hooks = list(hooks.get("request", []))
    if any(isinstance(hook, RequestRewriteHook) and hook.resolver is resolver for hook in request_hooks):
        return False

    request_hooks.append(RequestRewriteHook(resolver))
    client.event_hooks = {**hooks, "request": request_hooks}
    logger.debug("register_interceptor: request hook attached")
    return True


class DnsCacheTransport(httpx.AsyncBaseTransport):
    """
    DNS caching transport wrapper for httpx.

    Wraps another transport and rewrites each request to a cached IP
    before delegating.

    Example:
        resolver = CachedDnsResolver()
        transport = DnsCacheTransport(httpx.AsyncHTTPTransport(), resolver)
        client = httpx.AsyncClient(transport=transport)
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        resolver: "CachedDnsResolver",
        *,
        close_resolver: bool = False,
    ) -> None:
        """
        Create a new DnsCacheTransport.

        Args:
            inner: The wrapped transport to delegate requests to
            resolver: The resolver service shared with other clients
            close_resolver: Shut the resolver down when the transport closes
        """
        self._inner = inner
        self._resolver = resolver
        self._close_resolver = close_resolver

    @property
    def resolver(self) -> "CachedDnsResolver":
        """Get the underlying resolver service"""
        return self._resolver

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Handle an async HTTP request with DNS caching"""
        request = await rewrite_request(request, self._resolver)
        return await self._inner.handle_async_request(request)

    async def aclose(self) -> None:
        """Close the transport"""
        if self._close_resolver:
            await self._resolver.shutdown()
        await self._inner.aclose()
