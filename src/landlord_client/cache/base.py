"""Base class for lookup caches.

``LandlordCache`` defines the four coroutines a cache backend provides to
:class:`~landlord_client.client.LandlordClient`.  Unlike an ABC, every method
has a body that raises ``NotImplementedError``, so a subclass can implement
only the lookups it cares about::

    class DomainOnlyCache(LandlordCache):
        async def get_tenant_id_lookup(self, domain: str) -> str: ...
        async def cache_tenant_id_lookup(self, domain: str, tenant_id: str) -> None: ...

The client treats any exception raised by a read as a miss and ignores any
exception raised by a write, so an unimplemented tenant-url half simply
means those lookups always go to the directory service.

Backends must be safe for concurrent use by many lookups at once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from landlord_client.core.types import TenantUrlEntry


class LandlordCache:
    """Base class for tenant-id and tenant-url caches."""

    async def get_tenant_id_lookup(self, domain: str) -> str:
        """Return the tenant id cached for *domain*.

        Raises:
            CacheMissError: When *domain* is not cached.
        """
        raise NotImplementedError(f"{type(self).__name__}.get_tenant_id_lookup")

    async def cache_tenant_id_lookup(self, domain: str, tenant_id: str) -> None:
        """Store *tenant_id* for *domain*.  Overwrites any previous value."""
        raise NotImplementedError(f"{type(self).__name__}.cache_tenant_id_lookup")

    async def get_tenant_url_lookup(self, tenant_id: str) -> TenantUrlEntry:
        """Return the URL entry cached for *tenant_id*, expired or not.

        Raises:
            CacheMissError: When *tenant_id* is not cached.
        """
        raise NotImplementedError(f"{type(self).__name__}.get_tenant_url_lookup")

    async def cache_tenant_url_lookup(self, tenant_id: str, url: str, expiry: int) -> None:
        """Store *url* for *tenant_id*, fresh until the Unix timestamp *expiry*."""
        raise NotImplementedError(f"{type(self).__name__}.cache_tenant_url_lookup")


__all__ = ["LandlordCache"]
