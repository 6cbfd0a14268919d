"""
Configuration utilities for cached_dns_resolve

Reads HTTPX_DNS_* environment variables (milliseconds, matching the
conventional *_MS naming) and converts them to seconds.
"""
import ipaddress
import logging
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass
class DnsCacheConfig:
    """Configuration for the cached DNS resolver"""

    disabled: bool = False
    """Turn the interceptor into a pass-through. Default: False"""

    ttl_seconds: float = 5.0
    """Freshness window before an entry is re-resolved. Default: 5.0"""

    grace_expire_multiplier: float = 2.0
    """Multiplier on ttl_seconds for the store's soft-expiry window. Default: 2"""

    idle_ttl_seconds: float = 3600.0
    """Inactivity window after which an unused entry is evicted. Default: 3600.0 (1 hour)"""

    background_scan_seconds: float = 2.4
    """Interval between background refresh sweeps. Default: 2.4"""

    max_entries: int = 100
    """Maximum number of cached hostnames. Default: 100"""

    max_concurrent_refreshes: int = 10
    """Maximum resolutions started concurrently by one sweep. Default: 10"""

    @property
    def cache_expire_seconds(self) -> float:
        """Soft-expiry window of the store"""
        return self.ttl_seconds * self.grace_expire_multiplier


DEFAULT_DNS_CACHE_CONFIG = DnsCacheConfig()

ENV_DISABLE = "HTTPX_DNS_DISABLE"
ENV_TTL_MS = "HTTPX_DNS_CACHE_TTL_MS"
ENV_EXPIRE_MULTIPLIER = "HTTPX_DNS_CACHE_EXPIRE_MULTIPLIER"
ENV_IDLE_TTL_MS = "HTTPX_DNS_CACHE_IDLE_TTL_MS"
ENV_BACKGROUND_SCAN_MS = "HTTPX_DNS_BACKGROUND_SCAN_MS"
ENV_CACHE_SIZE = "HTTPX_DNS_CACHE_SIZE"
ENV_MAX_CONCURRENT_REFRESHES = "HTTPX_DNS_MAX_CONCURRENT_REFRESHES"


def _env_positive_number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"_env_positive_number: {name}={raw!r} is not a number, ignoring")
        return default
    if not math.isfinite(value) or value <= 0:
        logger.warning(f"_env_positive_number: {name}={raw!r} must be a finite positive number, ignoring")
        return default
    return value


def _env_milliseconds(env: Mapping[str, str], name: str, default_seconds: float) -> float:
    value = _env_positive_number(env, name, -1.0)
    return default_seconds if value < 0 else value / 1000


def load_config_from_env(env: Optional[Mapping[str, str]] = None) -> DnsCacheConfig:
    """
    Build a DnsCacheConfig from environment variables.

    Args:
        env: Mapping to read from. Defaults to os.environ.

    Returns:
        DnsCacheConfig with defaults for anything unset or invalid.
    """
    if env is None:
        env = os.environ

    defaults = DEFAULT_DNS_CACHE_CONFIG
    config = DnsCacheConfig(
        disabled=env.get(ENV_DISABLE, "").strip().lower() == "true",
        ttl_seconds=_env_milliseconds(env, ENV_TTL_MS, defaults.ttl_seconds),
        grace_expire_multiplier=_env_positive_number(
            env, ENV_EXPIRE_MULTIPLIER, defaults.grace_expire_multiplier
        ),
        idle_ttl_seconds=_env_milliseconds(env, ENV_IDLE_TTL_MS, defaults.idle_ttl_seconds),
        background_scan_seconds=_env_milliseconds(env, ENV_BACKGROUND_SCAN_MS, defaults.background_scan_seconds),
        max_entries=max(1, int(_env_positive_number(env, ENV_CACHE_SIZE, defaults.max_entries))),
        max_concurrent_refreshes=max(1, int(
            _env_positive_number(env, ENV_MAX_CONCURRENT_REFRESHES, defaults.max_concurrent_refreshes)
        )),
    )
    logger.debug(f"load_config_from_env: config={config!r}")
    return config


def validate_config(config: DnsCacheConfig) -> DnsCacheConfig:
    """Raise ValueError if any setting is out of range"""
    for name in (
        "ttl_seconds",
        "grace_expire_multiplier",
        "idle_ttl_seconds",
        "background_scan_seconds",
    ):
        value = getattr(config, name)
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name} must be a finite positive number, got {value!r}")
    if config.max_entries < 1:
        raise ValueError(f"max_entries must be at least 1, got {config.max_entries!r}")
    if config.max_concurrent_refreshes < 1:
        raise ValueError(
            f"max_concurrent_refreshes must be at least 1, got {config.max_concurrent_refreshes!r}"
        )
    return config


def is_ip_address(host: str) -> bool:
    """Check if a host is a literal IPv4 or IPv6 address"""
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True
