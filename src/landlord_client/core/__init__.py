"""Core abstractions — types, config, and exceptions."""

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
from landlord_client.core.types import (
    LandlordCacheProtocol,
    TenantRecord,
    TenantSummary,
    TenantUrlEntry,
)

__all__ = [
    # Config
    "DEFAULT_ENDPOINT",
    "DEFAULT_USER_AGENT",
    "LandlordConfig",
    # Exceptions
    "LandlordError",
    "InvalidArgumentError",
    "ConfigurationError",
    "CacheMissError",
    "TenantNotFoundError",
    "TenantIdNotFoundError",
    "TenantLookupFailedError",
    "LandlordNotAvailableError",
    # Types
    "LandlordCacheProtocol",
    "TenantRecord",
    "TenantSummary",
    "TenantUrlEntry",
]
