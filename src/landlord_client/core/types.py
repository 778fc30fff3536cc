"""Domain types and data models for landlord-client.

This module is the single source of truth for the library's domain
vocabulary.  All other modules import *from* this module — never the reverse.

Design notes
------------
* :class:`TenantUrlEntry` is a Pydantic ``frozen=True`` model so cached
  values are safe to share across async tasks and serialise to JSON for
  distributed cache backends without extra code.
* :class:`TenantSummary` and :class:`TenantRecord` describe the two directory
  payloads.  They accept the service's camelCase field names and ignore
  unknown fields, so a richer response never breaks parsing.
* :class:`LandlordCacheProtocol` is the structural contract a cache must
  satisfy.  The client checks it at construction time.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class TenantUrlEntry(BaseModel):
    """A cached tenant URL and the moment it stops being fresh.

    Attributes:
        url: Absolute base URL with exactly one trailing slash.
        expiry: Unix timestamp (seconds) after which the entry is stale.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Canonical tenant base URL.")
    expiry: int = Field(..., description="Absolute expiry, seconds since the epoch.")

    def is_expired(self, now: int) -> bool:
        """Return ``True`` once *now* has reached the expiry timestamp."""
        return self.expiry <= now


class TenantSummary(BaseModel):
    """One element of the ``GET /v1/tenants?domain=`` response array."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    tenant_id: str = Field(..., alias="tenantId")
    domain: str | None = None


class TenantRecord(BaseModel):
    """Body of the ``GET /v1/tenants/{tenantId}`` response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    domain: str
    is_http_site: StrictBool = Field(..., alias="isHttpSite")


@runtime_checkable
class LandlordCacheProtocol(Protocol):
    """Structural type for lookup caches.

    Any object exposing these four coroutines can back a
    :class:`~landlord_client.client.LandlordClient`.  Reads raise when the key
    is absent; writes are idempotent upserts.
    """

    async def get_tenant_id_lookup(self, domain: str) -> str:
        """Return the cached tenant id for *domain*."""
        ...

    async def cache_tenant_id_lookup(self, domain: str, tenant_id: str) -> None:
        """Store *tenant_id* under *domain*."""
        ...

    async def get_tenant_url_lookup(self, tenant_id: str) -> TenantUrlEntry:
        """Return the cached URL entry for *tenant_id*."""
        ...

    async def cache_tenant_url_lookup(self, tenant_id: str, url: str, expiry: int) -> None:
        """Store *url* for *tenant_id* until *expiry*."""
        ...


__all__ = [
    "LandlordCacheProtocol",
    "TenantRecord",
    "TenantSummary",
    "TenantUrlEntry",
]
