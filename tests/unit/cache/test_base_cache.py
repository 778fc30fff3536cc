"""Unit tests for the LandlordCache base class and the cache protocol."""

from __future__ import annotations

import pytest

from landlord_client.cache.base import LandlordCache
from landlord_client.cache.lru import LRULandlordCache
from landlord_client.core.types import LandlordCacheProtocol

pytestmark = pytest.mark.unit


class DomainOnly(LandlordCache):
    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get_tenant_id_lookup(self, domain: str) -> str:
        return self.data[domain]

    async def cache_tenant_id_lookup(self, domain: str, tenant_id: str) -> None:
        self.data[domain] = tenant_id


class TestBaseClass:
    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("get_tenant_id_lookup", ("d",)),
            ("cache_tenant_id_lookup", ("d", "t")),
            ("get_tenant_url_lookup", ("t",)),
            ("cache_tenant_url_lookup", ("t", "https://a.example.com/", 1)),
        ],
    )
    async def test_unimplemented_operations_raise(self, method, args):
        with pytest.raises(NotImplementedError, match=method):
            await getattr(LandlordCache(), method)(*args)

    async def test_partial_subclass(self):
        c = DomainOnly()
        await c.cache_tenant_id_lookup("d", "t")
        assert await c.get_tenant_id_lookup("d") == "t"
        with pytest.raises(NotImplementedError):
            await c.get_tenant_url_lookup("t")


class TestProtocol:
    def test_base_and_lru_satisfy_protocol(self):
        assert isinstance(LandlordCache(), LandlordCacheProtocol)
        assert isinstance(LRULandlordCache(), LandlordCacheProtocol)
        assert isinstance(DomainOnly(), LandlordCacheProtocol)

    def test_duck_typed_cache(self):
        class Duck:
            async def get_tenant_id_lookup(self, domain): ...
            async def cache_tenant_id_lookup(self, domain, tenant_id): ...
            async def get_tenant_url_lookup(self, tenant_id): ...
            async def cache_tenant_url_lookup(self, tenant_id, url, expiry): ...

        assert isinstance(Duck(), LandlordCacheProtocol)

    def test_incomplete_object(self):
        class HalfDuck:
            async def get_tenant_id_lookup(self, domain): ...

        assert not isinstance(HalfDuck(), LandlordCacheProtocol)


class TestPartialCacheInClient:
    async def test_url_lookups_bypass_partial_cache(self, landlord, clock):
        from landlord_client.client import LandlordClient  # noqa: PLC0415

        cache = DomainOnly()
        async with LandlordClient(
            cache=cache, transport=landlord.transport, endpoint="http://landlord.test"
        ) as c:
            c._clock = clock
            tenant_id = await c.lookup_tenant_id("brightspace.localhost")
            assert cache.data == {"brightspace.localhost": tenant_id}
            await c.lookup_tenant_url(tenant_id)
            await c.lookup_tenant_url(tenant_id)
        assert landlord.calls(f"/v1/tenants/{tenant_id}") == 2
