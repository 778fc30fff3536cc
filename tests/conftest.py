"""Shared pytest fixtures for the landlord-client test suite.

Hierarchy
---------
landlord                FakeLandlord — scriptable directory service behind httpx.MockTransport
clock                   FrozenClock patched into clients as ``_clock``
cache                   fresh LRULandlordCache per test
client                  LandlordClient in background-refresh mode
blocking_client         LandlordClient in block-on-refresh mode
errors                  list collecting events from the clients' error channel
eager_loop              running loop switched to asyncio.eager_task_factory
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import pytest_asyncio

from landlord_client.cache.lru import LRULandlordCache
from landlord_client.client import LandlordClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

ENDPOINT = "http://landlord.test"
TENANT_ID = "88ce2351-b0e6-4d58-b1b1-4b5e8d8e5c3a"
DOMAIN = "brightspace.localhost"
NOW = 1_700_000_000


class FakeLandlord:
    """In-process stand-in for the directory service.

    Routes:
        ``GET /v1/tenants?domain=`` — answered from ``searches``.
        ``GET /v1/tenants/{id}``     — answered from ``tenants``.
        ``GET /ping``                — ``ping_status``.

    Set ``delay`` to slow every response down, ``gate`` to hold responses
    until the event is set, and ``error`` to raise a transport error instead
    of answering.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.searches: dict[str, tuple[int, Any]] = {}
        self.tenants: dict[str, tuple[int, Any, Any]] = {}
        self.ping_status = 200
        self.delay = 0.0
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None

    def add_search(self, domain: str, body: Any, status: int = 200) -> None:
        self.searches[domain] = (status, body)

    def add_tenant(
        self,
        tenant_id: str,
        domain: str = DOMAIN,
        is_http_site: bool = False,
        max_age: int | None = 3600,
        status: int = 200,
        body: Any = None,
        cache_control: bytes | None = None,
    ) -> None:
        headers: Any = {"Cache-Control": f"public, max-age={max_age}"} if max_age is not None else {}
        if cache_control is not None:
            headers = [(b"Cache-Control", cache_control)]
        if body is None:
            body = {"tenantId": tenant_id, "domain": domain, "isHttpSite": is_http_site}
        self.tenants[tenant_id] = (status, body, headers)

    def calls(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        path = request.url.path
        if path == "/ping":
            return httpx.Response(self.ping_status, text="pong")
        if path == "/v1/tenants":
            status, body = self.searches.get(request.url.params.get("domain", ""), (200, []))
            return httpx.Response(status, json=body)
        if path.startswith("/v1/tenants/"):
            tenant_id = path.rsplit("/", 1)[1]
            if tenant_id not in self.tenants:
                return httpx.Response(404, json={"error": "not found"})
            status, body, headers = self.tenants[tenant_id]
            return httpx.Response(status, json=body, headers=headers)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FrozenClock:
    """Replacement for ``LandlordClient._clock`` with a settable time."""

    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def landlord() -> FakeLandlord:
    fake = FakeLandlord()
    fake.add_search(DOMAIN, [{"tenantId": TENANT_ID, "domain": DOMAIN}])
    fake.add_tenant(TENANT_ID)
    return fake


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def cache() -> LRULandlordCache:
    return LRULandlordCache(max_size=100)


@pytest.fixture
def errors() -> list[Exception]:
    return []


def _make_client(
    landlord: FakeLandlord,
    cache: LRULandlordCache,
    clock: FrozenClock,
    errors: list[Exception],
    **settings: Any,
) -> LandlordClient:
    c = LandlordClient(
        cache=cache,
        transport=landlord.transport,
        on_error=errors.append,
        endpoint=ENDPOINT,
        **settings,
    )
    c._clock = clock  # type: ignore[method-assign]
    return c


@pytest_asyncio.fixture
async def client(landlord, cache, clock, errors) -> AsyncIterator[LandlordClient]:
    c = _make_client(landlord, cache, clock, errors)
    yield c
    await c.aclose()


@pytest_asyncio.fixture
async def blocking_client(landlord, cache, clock, errors) -> AsyncIterator[LandlordClient]:
    c = _make_client(landlord, cache, clock, errors, block_on_refresh=True)
    yield c
    await c.aclose()


@pytest_asyncio.fixture
async def eager_loop() -> AsyncIterator[asyncio.AbstractEventLoop]:
    """Run the test's tasks with ``asyncio.eager_task_factory`` (Python 3.12+)."""
    loop = asyncio.get_running_loop()
    loop.set_task_factory(asyncio.eager_task_factory)
    yield loop
    loop.set_task_factory(None)
