"""Lookup cache backends.

``RedisLandlordCache`` requires the ``redis`` extra only when it is
instantiated; importing it is always safe.
"""

from landlord_client.cache.base import LandlordCache
from landlord_client.cache.lru import LRULandlordCache
from landlord_client.cache.redis import RedisLandlordCache

__all__ = ["LRULandlordCache", "LandlordCache", "RedisLandlordCache"]
