"""Pytest configuration and fixtures for cached_dns_resolve tests."""
import asyncio
import socket
from typing import Any, Optional

import httpx
import pytest

from cached_dns_resolve import CachedDnsResolver, DnsCacheConfig, LookupAddress


class FakeClock:
    """Manually advanced clock returning Unix timestamps"""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePlatformResolver:
    """Platform resolver answering from a host -> ips table and recording calls"""

    def __init__(self, answers: Optional[dict[str, Any]] = None) -> None:
        self.answers: dict[str, Any] = dict(answers or {})
        self.calls: list[str] = []

    def set(self, host: str, answer: Any) -> None:
        self.answers[host] = answer

    def count(self, host: str) -> int:
        return self.calls.count(host)

    async def lookup(self, host: str) -> list[LookupAddress]:
        answer = self.answers.get(host)
        if answer is None:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        if isinstance(answer, BaseException):
            raise answer
        return [LookupAddress(address=ip, family=socket.AF_INET) for ip in answer]

    async def __call__(self, host: str) -> list[LookupAddress]:
        self.calls.append(host)
        return await self.lookup(host)


class BlockingPlatformResolver(FakePlatformResolver):
    """Platform resolver that waits for release before answering"""

    def __init__(self, answers: Optional[dict[str, Any]] = None) -> None:
        super().__init__(answers)
        self.release = asyncio.Event()

    async def __call__(self, host: str) -> list[LookupAddress]:
        self.calls.append(host)
        await self.release.wait()
        return await self.lookup(host)


class MockAsyncTransport(httpx.AsyncBaseTransport):
    """Mock async transport capturing every request"""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.closed = False

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, content=b"OK")

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def platform() -> FakePlatformResolver:
    return FakePlatformResolver({
        "api.example.com": ["10.0.0.1", "10.0.0.2"],
        "single.example.com": ["10.1.0.1"],
    })


@pytest.fixture
def config() -> DnsCacheConfig:
    return DnsCacheConfig(ttl_seconds=5.0, idle_ttl_seconds=60.0, max_entries=3)


@pytest.fixture
def resolver(
    config: DnsCacheConfig,
    platform: FakePlatformResolver,
    clock: FakeClock,
) -> CachedDnsResolver:
    return CachedDnsResolver(config, platform_resolve=platform, clock=clock)


@pytest.fixture
def mock_transport() -> MockAsyncTransport:
    return MockAsyncTransport()
