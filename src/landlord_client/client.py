"""``LandlordClient`` — cached, coalescing tenant resolution.

The client answers two questions by asking the Landlord directory service:

1. *Which tenant owns this domain?* — :meth:`LandlordClient.lookup_tenant_id`
2. *What is this tenant's base URL?* — :meth:`LandlordClient.lookup_tenant_url`

Resolution pipeline
-------------------
::

    lookup_tenant_id(domain)
        │
        ├── in flight for domain? ──→ join it
        ├── cache HIT ──────────────→ tenant id            (never expires)
        └── cache MISS / error
                │
                ▼
            GET /v1/tenants?domain=…  → first tenantId → best-effort cache write

    lookup_tenant_url(tenant_id)
        │
        ├── in flight for tenant id? ──→ join it
        ├── cache MISS / error ────────→ fetch-and-cache (errors propagate)
        ├── cache HIT, fresh ──────────→ cached url
        └── cache HIT, expired
                ├── block_on_refresh ──→ fetch-and-cache, stale url on failure
                └── default ───────────→ stale url now, fetch-and-cache in background

Failures of a background refresh, and of a blocking refresh that fell back to
the stale URL, never reach the caller.  They are delivered to the error
handlers registered with ``on_error`` / :meth:`add_error_handler`.

Typical setup::

    from landlord_client import LandlordClient, LandlordConfig

    async with LandlordClient(LandlordConfig(name="my-service")) as landlord:
        tenant_id = await landlord.lookup_tenant_id("school.example.com")
        base_url = await landlord.lookup_tenant_url(tenant_id)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from landlord_client.cache.lru import LRULandlordCache
from landlord_client.cache.redis import RedisLandlordCache
from landlord_client.coalesce import InflightRegistry
from landlord_client.core.config import LandlordConfig
from landlord_client.core.exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    LandlordNotAvailableError,
    TenantIdNotFoundError,
    TenantLookupFailedError,
    TenantNotFoundError,
)
from landlord_client.core.types import (
    LandlordCacheProtocol,
    TenantRecord,
    TenantSummary,
    TenantUrlEntry,
)
from landlord_client.utils.cache_control import parse_max_age
from landlord_client.utils.url import build_tenant_url

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    ErrorHandler = Callable[[Exception], object]

logger = logging.getLogger(__name__)


class LandlordClient:
    """Resolve tenant ids and tenant URLs through a cache and the directory service.

    Args:
        config: Client settings.  When omitted, a :class:`LandlordConfig` is
            built from *settings* (and the environment).
        cache: Any object implementing
            :class:`~landlord_client.core.types.LandlordCacheProtocol`.
            Defaults to the backend selected by ``config.cache_backend``.
            A supplied cache is owned by the caller and never closed here.
        transport: Optional ``httpx.AsyncBaseTransport`` (e.g.
            ``httpx.MockTransport`` in tests).
        on_error: Callable invoked with every refresh failure that was not
            raised to a caller.
        **settings: Keyword overrides for :class:`LandlordConfig`
            (``endpoint``, ``name``, ``block_on_refresh``, …).  Not allowed
            together with *config*.

    Raises:
        ConfigurationError: When *cache* does not implement the cache
            protocol, or when both *config* and *settings* are given.
    """

    def __init__(
        self,
        config: LandlordConfig | None = None,
        *,
        cache: Any = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_error: ErrorHandler | None = None,
        **settings: Any,
    ) -> None:
        if config is not None and settings:
            raise ConfigurationError(
                "settings",
                "pass either a LandlordConfig or keyword settings, not both",
                details={"settings": sorted(settings)},
            )
        self.config = config if config is not None else LandlordConfig(**settings)

        if cache is None:
            self._cache = self._build_default_cache(self.config)
            self._owns_cache = True
        elif isinstance(cache, LandlordCacheProtocol):
            self._cache = cache
            self._owns_cache = False
        else:
            raise ConfigurationError(
                "cache",
                "must implement get/cache_tenant_id_lookup and get/cache_tenant_url_lookup",
                details={"type": type(cache).__name__},
            )

        self._http = httpx.AsyncClient(
            base_url=self.config.endpoint,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.request_timeout,
            follow_redirects=True,
            transport=transport,
        )

        self._searches: InflightRegistry[str] = InflightRegistry("tenant-id")
        self._lookups: InflightRegistry[str] = InflightRegistry("tenant-url")
        self._fetches: InflightRegistry[str] = InflightRegistry("tenant-fetch")
        # Strong references keep fire-and-forget refreshes alive until done.
        self._refreshes: set[asyncio.Task[str]] = set()

        self._error_handlers: list[ErrorHandler] = []
        if on_error is not None:
            self._error_handlers.append(on_error)

        logger.info(
            "LandlordClient initialised endpoint=%s block_on_refresh=%s cache=%s",
            self.config.endpoint,
            self.config.block_on_refresh,
            type(self._cache).__name__,
        )

    @staticmethod
    def _build_default_cache(config: LandlordConfig) -> Any:
        if config.cache_backend == "redis":
            return RedisLandlordCache(config.redis_url, key_prefix=config.redis_key_prefix)
        return LRULandlordCache(max_size=config.cache_max_size)

    @property
    def cache(self) -> Any:
        """The cache backing this client."""
        return self._cache

    @property
    def user_agent(self) -> str:
        """User-Agent sent on every upstream request."""
        return self.config.user_agent

    #############
    # Lifecycle #
    #############

    async def __aenter__(self) -> LandlordClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for background refreshes, then release the HTTP connection pool.

        A cache built by the client is closed too; a supplied one is not.
        """
        await self.wait_for_refreshes()
        await self._http.aclose()
        if self._owns_cache and hasattr(self._cache, "close"):
            await self._cache.close()
        logger.info("LandlordClient closed")

    async def wait_for_refreshes(self) -> None:
        """Block until every background refresh scheduled so far has settled.

        Refresh failures have already been emitted to the error handlers and
        are not raised here.
        """
        while self._refreshes:
            await asyncio.gather(*self._refreshes, return_exceptions=True)

    ################
    # Error events #
    ################

    def add_error_handler(self, handler: ErrorHandler) -> None:
        """Register *handler* to receive refresh failures hidden from callers."""
        self._error_handlers.append(handler)

    def remove_error_handler(self, handler: ErrorHandler) -> None:
        """Unregister *handler*.  Unknown handlers are ignored."""
        if handler in self._error_handlers:
            self._error_handlers.remove(handler)

    def _emit_error(self, exc: Exception) -> None:
        logger.warning("Tenant URL refresh failed, serving stale value: %s", exc)
        for handler in list(self._error_handlers):
            try:
                handler(exc)
            except Exception:
                logger.exception("Landlord error handler %r raised", handler)

    ####################
    # Tenant-id lookup #
    ####################

    async def lookup_tenant_id(self, domain: str) -> str:
        """Return the tenant id that owns *domain*.

        Concurrent calls for the same domain share one resolution.  A resolved
        id is cached forever: a domain never moves to another tenant.

        Args:
            domain: Host name of the tenant site (case-sensitive).

        Returns:
            The opaque tenant id.

        Raises:
            InvalidArgumentError: When *domain* is not a non-empty string.
            TenantNotFoundError: When no tenant owns *domain*.
            TenantLookupFailedError: On transport errors, unexpected statuses,
                or a malformed response body.
        """
        if not isinstance(domain, str) or not domain:
            raise InvalidArgumentError("domain")
        return await self._searches.run(domain, lambda: self._resolve_tenant_id(domain))

    async def _resolve_tenant_id(self, domain: str) -> str:
        try:
            tenant_id = await self._cache.get_tenant_id_lookup(domain)
        except Exception as exc:
            logger.debug("Cache MISS domain=%s (%s)", domain, type(exc).__name__)
        else:
            logger.debug("Cache HIT domain=%s", domain)
            return tenant_id

        tenant_id = await self._search_tenant_id(domain)
        await self._cache_write(self._cache.cache_tenant_id_lookup, domain, tenant_id)
        return tenant_id

    async def _search_tenant_id(self, domain: str) -> str:
        try:
            response = await self._http.get("/v1/tenants", params={"domain": domain})
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TenantLookupFailedError(domain, reason=str(exc), cause=exc) from exc

        if not isinstance(body, list):
            raise TenantLookupFailedError(domain, reason="response body is not a list")
        if not body:
            raise TenantNotFoundError(domain)

        # Several matches: upstream ordering decides.
        try:
            summary = TenantSummary.model_validate(body[0])
        except ValidationError as exc:
            raise TenantLookupFailedError(
                domain, reason="first match has no tenantId", cause=exc
            ) from exc
        logger.debug(
            "Resolved domain=%s tenant_id=%s (matched domain=%s, %d candidates)",
            domain,
            summary.tenant_id,
            summary.domain,
            len(body),
        )
        return summary.tenant_id

    #####################
    # Tenant-url lookup #
    #####################

    async def lookup_tenant_url(self, tenant_id: str) -> str:
        """Return the canonical base URL of *tenant_id*.

        Fresh cached URLs are returned without a network call.  Expired ones
        are refreshed according to ``config.block_on_refresh``; in both modes
        a failed refresh yields the stale URL rather than an error.

        Args:
            tenant_id: Opaque tenant id.

        Returns:
            Absolute URL ending in exactly one ``/``.

        Raises:
            InvalidArgumentError: When *tenant_id* is not a non-empty string.
            TenantIdNotFoundError: When nothing is cached and the directory
                answers ``404``.
            TenantLookupFailedError: When nothing is cached and the request
                fails for any other reason.
        """
        if not isinstance(tenant_id, str) or not tenant_id:
            raise InvalidArgumentError("tenant_id")
        return await self._lookups.run(tenant_id, lambda: self._resolve_tenant_url(tenant_id))

    async def _resolve_tenant_url(self, tenant_id: str) -> str:
        entry = await self._read_url_entry(tenant_id)
        if entry is None:
            return await self._fetch_and_cache_url(tenant_id)

        if not entry.is_expired(self._clock()):
            logger.debug("Cache HIT tenant_id=%s", tenant_id)
            return entry.url

        if self.config.block_on_refresh:
            logger.debug("Cache STALE tenant_id=%s, refreshing", tenant_id)
            try:
                return await self._fetch_and_cache_url(tenant_id)
            except Exception as exc:
                self._emit_error(exc)
                return entry.url

        logger.debug("Cache STALE tenant_id=%s, refreshing in background", tenant_id)
        self._schedule_refresh(tenant_id)
        return entry.url

    async def _read_url_entry(self, tenant_id: str) -> TenantUrlEntry | None:
        try:
            value = await self._cache.get_tenant_url_lookup(tenant_id)
            if not isinstance(value, TenantUrlEntry):
                value = TenantUrlEntry.model_validate(value)
        except Exception as exc:
            logger.debug("Cache MISS tenant_id=%s (%s)", tenant_id, type(exc).__name__)
            return None
        return value

    def _schedule_refresh(self, tenant_id: str) -> None:
        task = self._fetches.start(tenant_id, lambda: self._fetch_tenant_url(tenant_id))
        if task in self._refreshes:
            return
        self._refreshes.add(task)
        task.add_done_callback(self._on_refresh_done)

    def _on_refresh_done(self, task: asyncio.Task[str]) -> None:
        self._refreshes.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._emit_error(exc)

    async def _fetch_and_cache_url(self, tenant_id: str) -> str:
        return await self._fetches.run(tenant_id, lambda: self._fetch_tenant_url(tenant_id))

    async def _fetch_tenant_url(self, tenant_id: str) -> str:
        try:
            response = await self._http.get(f"/v1/tenants/{quote(tenant_id, safe='')}")
        except httpx.HTTPError as exc:
            raise TenantLookupFailedError(tenant_id, reason=str(exc), cause=exc) from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise TenantIdNotFoundError(tenant_id)

        try:
            response.raise_for_status()
            record = TenantRecord.model_validate_json(response.content)
        except httpx.HTTPStatusError as exc:
            raise TenantLookupFailedError(
                tenant_id, reason=f"HTTP {response.status_code}", cause=exc
            ) from exc
        except ValidationError as exc:
            raise TenantLookupFailedError(
                tenant_id, reason="tenant record lacks domain or isHttpSite", cause=exc
            ) from exc

        url = build_tenant_url(record.domain, record.is_http_site)

        max_age = parse_max_age(response.headers.get("cache-control"))
        if max_age is None:
            logger.debug("No max-age for tenant_id=%s, not caching", tenant_id)
            return url

        await self._cache_write(
            self._cache.cache_tenant_url_lookup, tenant_id, url, self._clock() + max_age
        )
        return url

    ###########
    # Helpers #
    ###########

    async def _cache_write(self, write: Callable[..., Awaitable[None]], *args: Any) -> None:
        try:
            await write(*args)
        except Exception as exc:
            # A cache write failure never fails the lookup.
            logger.warning("Cache write %s%r failed: %s", write.__name__, args, exc)

    def _clock(self) -> int:
        """Current Unix time in whole seconds."""
        return round(time.time())

    ################
    # Health check #
    ################

    async def validate_configuration(self) -> str:
        """Check that the directory service answers ``GET /ping``.

        Returns:
            ``"OK"`` when the endpoint responded with a 2xx status.

        Raises:
            LandlordNotAvailableError: On any transport error or non-2xx status.
        """
        try:
            response = await self._http.get("/ping")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise LandlordNotAvailableError(self.config.endpoint, cause=exc) from exc
        logger.info("Landlord reachable at %s", self.config.endpoint)
        return "OK"


__all__ = ["LandlordClient"]
