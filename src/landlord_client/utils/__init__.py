"""Utility functions — header parsing and URL construction."""

from landlord_client.utils.cache_control import parse_max_age
from landlord_client.utils.url import build_tenant_url

__all__ = [
    "build_tenant_url",
    "parse_max_age",
]
