"""Redis-backed cache for tenant lookups.

This module provides :class:`RedisLandlordCache`, a distributed
implementation of :class:`~landlord_client.cache.base.LandlordCache` that lets
several processes share resolved tenant ids and URLs.

Cache keys
----------
``{prefix}:tenant-id:{domain}``
    The tenant id as a UTF-8 string.  No TTL: a domain never changes tenant.

``{prefix}:tenant-url:{tenant_id}``
    A JSON-serialised :class:`~landlord_client.core.types.TenantUrlEntry`.
    No Redis TTL either: the client has to see expired entries so it can
    serve them while refreshing.  Freshness is carried in ``expiry``.

Serialisation
-------------
:meth:`TenantUrlEntry.model_dump_json` / :meth:`TenantUrlEntry.model_validate_json`
keep the payload in step with the model.

Installation
------------
Requires the ``redis`` extra::

    pip install landlord-client[redis]
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from landlord_client.cache.base import LandlordCache
from landlord_client.core.exceptions import CacheMissError
from landlord_client.core.types import TenantUrlEntry

logger = logging.getLogger(__name__)


def _require_redis() -> Any:
    """Import ``redis.asyncio`` and raise ``ImportError`` with an actionable message on miss."""
    try:
        from redis import asyncio as aioredis  # noqa: PLC0415

    except ImportError as exc:
        raise ImportError(
            "RedisLandlordCache requires the 'redis' extra:\n"
            "    pip install landlord-client[redis]"
        ) from exc
    else:
        return aioredis


class RedisLandlordCache(LandlordCache):
    """Shared Redis cache for tenant-id and tenant-url lookups.

    Args:
        redis_url: Redis connection URL (e.g. ``redis://localhost:6379/0``).
            Ignored when *client* is given.
        key_prefix: Prefix applied to all Redis keys.  Use a distinct prefix
            per environment to avoid key collisions in a shared instance.
        client: An existing ``redis.asyncio.Redis`` (or compatible) client.
            The cache does not close a client it did not create.

    Example::

        cache = RedisLandlordCache("redis://localhost:6379/0")
        async with LandlordClient(cache=cache) as landlord:
            url = await landlord.lookup_tenant_url(tenant_id)
        await cache.close()
    """

    def __init__(
        self,
        redis_url: str | None = None,
        key_prefix: str = "landlord",
        client: Any = None,
    ) -> None:
        if client is None:
            if not redis_url:
                msg = "RedisLandlordCache needs either redis_url or client"
                raise ValueError(msg)
            aioredis = _require_redis()
            client = aioredis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=False,
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._redis: Any = client
        self._prefix = key_prefix
        logger.info("RedisLandlordCache initialised prefix=%s", key_prefix)

    async def close(self) -> None:
        """Close the Redis connection pool if this cache created it."""
        if self._owns_client:
            await self._redis.aclose()
            logger.info("RedisLandlordCache closed")

    ####################
    # Internal helpers #
    ####################

    def _tenant_id_key(self, domain: str) -> str:
        return f"{self._prefix}:tenant-id:{domain}"

    def _tenant_url_key(self, tenant_id: str) -> str:
        return f"{self._prefix}:tenant-url:{tenant_id}"

    @staticmethod
    def _decode(data: bytes | str) -> str:
        return data.decode("utf-8") if isinstance(data, bytes) else data

    ###########
    # Lookups #
    ###########

    async def get_tenant_id_lookup(self, domain: str) -> str:
        cached = await self._redis.get(self._tenant_id_key(domain))
        if cached is None:
            raise CacheMissError("tenant-id", domain)
        return self._decode(cached)

    async def cache_tenant_id_lookup(self, domain: str, tenant_id: str) -> None:
        await self._redis.set(self._tenant_id_key(domain), tenant_id.encode("utf-8"))

    async def get_tenant_url_lookup(self, tenant_id: str) -> TenantUrlEntry:
        cached = await self._redis.get(self._tenant_url_key(tenant_id))
        if cached is None:
            raise CacheMissError("tenant-url", tenant_id)
        try:
            return TenantUrlEntry.model_validate_json(self._decode(cached))
        except ValidationError as exc:
            logger.warning("Corrupt cache entry for tenant id=%s, treating as miss", tenant_id)
            raise CacheMissError("tenant-url", tenant_id) from exc

    async def cache_tenant_url_lookup(self, tenant_id: str, url: str, expiry: int) -> None:
        entry = TenantUrlEntry(url=url, expiry=expiry)
        await self._redis.set(
            self._tenant_url_key(tenant_id),
            entry.model_dump_json().encode("utf-8"),
        )


__all__ = ["RedisLandlordCache"]
