"""Configuration management for landlord-client.

``LandlordConfig`` is a ``pydantic_settings.BaseSettings`` model that reads its
values from environment variables (prefix ``LANDLORD_``), an optional ``.env``
file, or explicit keyword arguments.

Environment variables
---------------------
Every field can be overridden with ``LANDLORD_<FIELD_NAME_UPPER>``::

    LANDLORD_ENDPOINT=https://landlord.dev.brightspace.com
    LANDLORD_NAME=my-service
    LANDLORD_BLOCK_ON_REFRESH=true
    LANDLORD_CACHE_BACKEND=redis
    LANDLORD_REDIS_URL=redis://localhost:6379/0
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

try:
    from importlib.metadata import version as _pkg_version
    CLIENT_VERSION: str = _pkg_version("landlord-client")
except Exception:  # pragma: no cover  (package not installed)
    CLIENT_VERSION = "0.0.0.dev0"

#: Production directory service.
DEFAULT_ENDPOINT = "https://landlord.brightspace.com"

#: Agent string sent when no client ``name`` is configured.
DEFAULT_USER_AGENT = f"landlord-client/{CLIENT_VERSION}"

_ENDPOINT_RE = re.compile(r"^https?://[^\s/]+(/\S*)?$")


class LandlordConfig(BaseSettings):
    """Settings for :class:`~landlord_client.client.LandlordClient`.

    Example — programmatic::

        config = LandlordConfig(
            endpoint="https://landlord.dev.brightspace.com",
            name="my-service",
            block_on_refresh=True,
        )

    Example — environment variables::

        # .env
        LANDLORD_NAME=my-service
        LANDLORD_CACHE_MAX_SIZE=10000

        config = LandlordConfig()  # reads from environment / .env
    """

    model_config = SettingsConfigDict(
        env_prefix="LANDLORD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ############
    # Upstream #
    ############

    endpoint: str = Field(
        default=DEFAULT_ENDPOINT,
        description="Base URL of the Landlord directory service.",
    )

    name: str | None = Field(
        default=None,
        max_length=255,
        description="Client identifier prepended to the User-Agent header.",
    )

    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds before an upstream request is abandoned.",
    )

    ####################
    # Staleness policy #
    ####################

    block_on_refresh: bool = Field(
        default=False,
        description=(
            "Await the upstream refresh of an expired tenant URL instead of "
            "returning the stale value and refreshing in the background."
        ),
    )

    #########
    # Cache #
    #########

    cache_backend: Literal["lru", "redis"] = Field(
        default="lru",
        description="Cache built when the client is not handed one explicitly.",
    )

    cache_max_size: int = Field(
        default=5000,
        ge=1,
        description="Entries kept per lookup kind by the in-memory LRU cache.",
    )

    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL.  Required when cache_backend='redis'.",
    )

    redis_key_prefix: str = Field(
        default="landlord",
        min_length=1,
        description="Prefix applied to every Redis key.",
    )

    ####################
    # Field validators #
    ####################

    @field_validator("endpoint", mode="before")
    @classmethod
    def _validate_endpoint(cls, v: str) -> str:
        """Require an http(s) URL and strip trailing slashes.

        Raises:
            ValueError: When *v* is not an absolute http(s) URL.
        """
        if not isinstance(v, str) or not _ENDPOINT_RE.match(v):
            msg = f"endpoint must be an absolute http(s) URL, got {v!r}"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("name", mode="before")
    @classmethod
    def _blank_name_is_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _validate_cross_field_consistency(self) -> LandlordConfig:
        """Raise ``ValueError`` if the configuration is internally inconsistent."""
        if self.cache_backend == "redis" and not self.redis_url:
            msg = "cache_backend='redis' requires redis_url to be set."
            raise ValueError(msg)
        return self

    ##################
    # Helper methods #
    ##################

    @property
    def user_agent(self) -> str:
        """Return the User-Agent sent on every upstream request.

        Example::

            LandlordConfig().user_agent               # "landlord-client/1.0.0"
            LandlordConfig(name="lms").user_agent     # "lms (landlord-client/1.0.0)"
        """
        if self.name:
            return f"{self.name} ({DEFAULT_USER_AGENT})"
        return DEFAULT_USER_AGENT


__all__ = ["CLIENT_VERSION", "DEFAULT_ENDPOINT", "DEFAULT_USER_AGENT", "LandlordConfig"]
