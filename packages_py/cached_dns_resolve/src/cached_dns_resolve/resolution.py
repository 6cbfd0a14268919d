"""
Hostname resolution for cached_dns_resolve.

Wraps a platform resolver, keeps only records that carry an address and
turns every failure into a ResolutionError.
"""
import asyncio
import logging
import socket
from collections.abc import Mapping
from typing import Any, Optional

from .errors import ResolutionError
from .types import LookupAddress, PlatformResolver

logger = logging.getLogger(__name__)


async def system_resolve(host: str) -> list[LookupAddress]:
    """
    Look up every address for a hostname with socket.getaddrinfo.

    Args:
        host: The hostname to resolve.

    Returns:
        De-duplicated address records, in resolver order.
    """
    loop = asyncio.get_running_loop()
    # Run DNS lookup in thread pool
    infos = await loop.run_in_executor(
        None,
        lambda: socket.getaddrinfo(host, None, socket.AF_UNSPEC, socket.SOCK_STREAM),
    )

    records: list[LookupAddress] = []
    seen: set[str] = set()
    for family, _socktype, _proto, _canonname, sockaddr in infos:
        address = sockaddr[0]
        if address not in seen:
            seen.add(address)
            records.append(LookupAddress(address=address, family=int(family)))
    return records


def _record_address(record: Any) -> Optional[str]:
    if isinstance(record, Mapping):
        return record.get("address")
    return getattr(record, "address", None)


def extract_addresses(lookup_response: Any) -> list[str]:
    """
    Pull the IP strings out of a platform lookup response.

    Raises:
        ResolutionError: If the response is not a list of records.
    """
    if not isinstance(lookup_response, (list, tuple)):
        raise ResolutionError("lookup response did not contain array of addresses")
    addresses = []
    for record in lookup_response:
        address = _record_address(record)
        if address is not None:
            addresses.append(str(address))
    return addresses


async def resolve_addresses(host: str, platform_resolve: PlatformResolver = system_resolve) -> list[str]:
    """
    Resolve a hostname to every usable IP address.

    Args:
        host: The hostname to resolve.
        platform_resolve: Async lookup returning address records.

    Returns:
        Non-empty list of IP address strings.

    Raises:
        ResolutionError: The lookup failed or returned no usable address.
    """
    try:
        lookup_response = await platform_resolve(host)
        ips = extract_addresses(lookup_response)
        if not ips:
            raise ResolutionError(f"no usable addresses for {host}", host=host)
    except ResolutionError as err:
        if err.host is None:
            err.host = host
        logger.error(f"resolve_addresses: host={host!r}, error={err}")
        raise
    except Exception as err:
        logger.error(f"resolve_addresses: host={host!r}, error={err!r}")
        raise ResolutionError(f"lookup failed for {host}: {err}", host=host) from err

    logger.debug(f"resolve_addresses: host={host!r}, ips={ips!r}")
    return ips
