"""In-process LRU cache for tenant lookups.

This module provides :class:`LRULandlordCache` — the default cache used by
:class:`~landlord_client.client.LandlordClient` when none is supplied.

Two independent LRUs
--------------------
Domain → tenant-id entries and tenant-id → URL entries live in separate
``OrderedDict`` instances with the same ``max_size``, so a burst of one kind
of lookup never evicts the other kind.

LRU eviction
------------
Both reads and writes move the touched key to the MRU end.  When a new key is
inserted into a full LRU, the oldest entry is evicted with
``popitem(last=False)`` — O(1).

Expiry
------
The cache never drops URL entries on expiry.  The client needs the stale
value to serve it while a refresh is running, so expiry is only interpreted
by the caller.

Task safety
-----------
Every operation holds ``_lock`` for its read-check-mutate sequence.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
import logging
from typing import Generic, TypeVar

from landlord_client.cache.base import LandlordCache
from landlord_client.core.exceptions import CacheMissError
from landlord_client.core.types import TenantUrlEntry

logger = logging.getLogger(__name__)

V = TypeVar("V")


class _LRU(Generic[V]):
    """Bounded mapping with least-recently-used eviction.  Not locked."""

    def __init__(self, max_size: int) -> None:
        self._max_size = max_size
        self._data: OrderedDict[str, V] = OrderedDict()

    def get(self, key: str) -> V | None:
        value = self._data.get(key)
        if value is not None:
            self._data.move_to_end(key)
        return value

    def set(self, key: str, value: V) -> None:
        if key not in self._data and len(self._data) >= self._max_size:
            evicted, _ = self._data.popitem(last=False)
            logger.debug("LRU evicted key=%s", evicted)
        self._data[key] = value
        self._data.move_to_end(key)

    def clear(self) -> int:
        count = len(self._data)
        self._data.clear()
        return count

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class LRULandlordCache(LandlordCache):
    """In-process LRU cache for both lookup kinds.

    Args:
        max_size: Maximum number of entries held *per lookup kind*.
            Default: 5000.

    Example::

        cache = LRULandlordCache(max_size=1000)
        client = LandlordClient(cache=cache)
    """

    def __init__(self, max_size: int = 5000) -> None:
        if max_size < 1:
            msg = "max_size must be >= 1"
            raise ValueError(msg)

        self._max_size = max_size
        self._tenant_ids: _LRU[str] = _LRU(max_size)
        self._tenant_urls: _LRU[TenantUrlEntry] = _LRU(max_size)
        self._lock = asyncio.Lock()

        # Telemetry counters, never reset.
        self._hits: int = 0
        self._misses: int = 0

        logger.debug("LRULandlordCache initialised max_size=%d", max_size)

    ###########
    # Lookups #
    ###########

    async def get_tenant_id_lookup(self, domain: str) -> str:
        async with self._lock:
            tenant_id = self._tenant_ids.get(domain)
            self._record(tenant_id is not None)
        if tenant_id is None:
            raise CacheMissError("tenant-id", domain)
        return tenant_id

    async def cache_tenant_id_lookup(self, domain: str, tenant_id: str) -> None:
        async with self._lock:
            self._tenant_ids.set(domain, tenant_id)

    async def get_tenant_url_lookup(self, tenant_id: str) -> TenantUrlEntry:
        async with self._lock:
            entry = self._tenant_urls.get(tenant_id)
            self._record(entry is not None)
        if entry is None:
            raise CacheMissError("tenant-url", tenant_id)
        return entry

    async def cache_tenant_url_lookup(self, tenant_id: str, url: str, expiry: int) -> None:
        entry = TenantUrlEntry(url=url, expiry=expiry)
        async with self._lock:
            self._tenant_urls.set(tenant_id, entry)

    ###########################
    # Metrics / introspection #
    ###########################

    def size(self) -> int:
        """Return the total number of cached entries across both kinds."""
        return len(self._tenant_ids) + len(self._tenant_urls)

    def stats(self) -> dict[str, int]:
        """Return a snapshot of cache state for monitoring.

        Returns:
            Dictionary with:
                - ``tenant_ids``: number of domain → tenant-id entries.
                - ``tenant_urls``: number of tenant-id → URL entries.
                - ``max_size``: configured per-kind maximum.
                - ``hits``: cumulative read hits since creation.
                - ``misses``: cumulative read misses since creation.
                - ``hit_rate_pct``: integer hit-rate percentage (0-100),
                  or 0 when no reads have occurred yet.
        """
        total = self._hits + self._misses
        hit_rate = int(self._hits * 100 / total) if total > 0 else 0
        return {
            "tenant_ids": len(self._tenant_ids),
            "tenant_urls": len(self._tenant_urls),
            "max_size": self._max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_pct": hit_rate,
        }

    async def clear(self) -> int:
        """Evict every entry of both kinds.

        Returns:
            Number of entries evicted.
        """
        async with self._lock:
            count = self._tenant_ids.clear() + self._tenant_urls.clear()
        logger.debug("LRULandlordCache cleared (%d entries evicted)", count)
        return count

    def _record(self, hit: bool) -> None:
        if hit:
            self._hits += 1
        else:
            self._misses += 1


__all__ = ["LRULandlordCache"]
