"""landlord-client — cached tenant resolution against the Landlord directory.

This package maps a tenant domain to its tenant id, and a tenant id to its
canonical base URL, caching both and coalescing concurrent lookups for the
same key into a single upstream request.

Quick start
-----------
.. code-block:: python

    from landlord_client import LandlordClient, LandlordConfig

    config = LandlordConfig(name="my-service", block_on_refresh=False)

    async with LandlordClient(config, on_error=report) as landlord:
        tenant_id = await landlord.lookup_tenant_id("school.example.com")
        base_url = await landlord.lookup_tenant_url(tenant_id)

Public surface
--------------
The symbols exported below form the **stable public API**.  Anything not
listed here is an implementation detail and may change between minor versions.

Optional extras
---------------
- ``RedisLandlordCache`` — requires ``pip install landlord-client[redis]``
  when it is instantiated.
"""

from landlord_client.cache.base import LandlordCache
from landlord_client.cache.lru import LRULandlordCache
from landlord_client.cache.redis import RedisLandlordCache
from landlord_client.client import LandlordClient
from landlord_client.core.config import CLIENT_VERSION as __version__
from landlord_client.core.config import DEFAULT_ENDPOINT, DEFAULT_USER_AGENT, LandlordConfig
from landlord_client.core.exceptions import (
    CacheMissError,
    ConfigurationError,
    InvalidArgumentError,
    LandlordError,
    LandlordNotAvailableError,
    TenantIdNotFoundError,
    TenantLookupFailedError,
    TenantNotFoundError,
)
from landlord_client.core.types import LandlordCacheProtocol, TenantUrlEntry

__all__ = [  # NOQA
    # Version
    "__version__",
    # Client
    "LandlordClient",
    # Configuration
    "DEFAULT_ENDPOINT",
    "DEFAULT_USER_AGENT",
    "LandlordConfig",
    # Domain types
    "LandlordCacheProtocol",
    "TenantUrlEntry",
    # Caches
    "LRULandlordCache",
    "LandlordCache",
    "RedisLandlordCache",
    # Exceptions
    "CacheMissError",
    "ConfigurationError",
    "InvalidArgumentError",
    "LandlordError",
    "LandlordNotAvailableError",
    "TenantIdNotFoundError",
    "TenantLookupFailedError",
    "TenantNotFoundError",
]
