"""
Error types for cached_dns_resolve
"""
from typing import Optional


class CachedDnsError(Exception):
    """Base class for errors raised by the DNS cache."""

    code = "CACHED_DNS_ERROR"


class ResolutionError(CachedDnsError):
    """Error thrown when a hostname lookup fails or yields no usable address."""

    code = "RESOLUTION_ERROR"

    def __init__(self, message: str, host: Optional[str] = None) -> None:
        super().__init__(message)
        self.host = host


class RequestRewriteError(CachedDnsError):
    """Error thrown when an outgoing request cannot be rewritten to a cached IP."""

    code = "REQUEST_REWRITE_ERROR"
