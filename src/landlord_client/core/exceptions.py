"""Custom exceptions for landlord-client.

All exceptions derive from ``LandlordError`` so callers can catch the entire
family with a single ``except LandlordError`` clause while still being able to
handle individual sub-types.

Exception hierarchy::

    LandlordError
    ├── InvalidArgumentError
    ├── ConfigurationError
    ├── CacheMissError
    ├── TenantNotFoundError
    ├── TenantIdNotFoundError
    ├── TenantLookupFailedError
    └── LandlordNotAvailableError

Design decisions:
    - Every exception carries a structured ``details`` dict that is safe to
      log.  It names the key (domain or tenant id) the failure applies to.
    - Upstream failures keep the underlying transport error on ``cause`` and
      are raised with ``raise ... from exc`` so the chain survives in
      tracebacks.
"""

from __future__ import annotations

from typing import Any


class LandlordError(Exception):
    """Base exception for all landlord-client errors.

    Attributes:
        message: Human-readable description of the error.
        details: Supplementary key-value context.  Safe to log.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return ``human-readable`` string."""
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def __repr__(self) -> str:
        """Return ``repr`` string for debugging purpose."""
        return f"{type(self).__name__}(message={self.message!r})"


class InvalidArgumentError(LandlordError, ValueError):
    """Raised when a lookup key is not a non-empty string.

    Detected before the cache or the network is touched.

    Attributes:
        argument: Name of the offending argument (``"domain"``, ``"tenant_id"``).
    """

    def __init__(
        self,
        argument: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"{argument} must be a non-empty string", details)
        self.argument = argument


class ConfigurationError(LandlordError):
    """Raised when the client is constructed with an invalid collaborator.

    Attributes:
        parameter: The name of the invalid parameter.
        reason: Why the current value is invalid.
    """

    def __init__(
        self,
        parameter: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Invalid configuration for {parameter!r}: {reason}", details)
        self.parameter = parameter
        self.reason = reason


class CacheMissError(LandlordError):
    """Raised by cache implementations when a key is absent.

    The client never surfaces this error; any cache read failure is a miss.

    Attributes:
        kind: ``"tenant-id"`` or ``"tenant-url"``.
        key: The domain or tenant id that was looked up.
    """

    def __init__(
        self,
        kind: str,
        key: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"No cached {kind} entry for {key!r}", details)
        self.kind = kind
        self.key = key


class TenantNotFoundError(LandlordError):
    """Raised when a domain matches no tenant in the directory.

    Attributes:
        domain: The domain that was looked up.
    """

    def __init__(
        self,
        domain: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"No tenant found for domain {domain!r}", details)
        self.domain = domain


class TenantIdNotFoundError(LandlordError):
    """Raised when the directory answers ``404`` for a tenant id.

    Attributes:
        tenant_id: The tenant id that was fetched.
    """

    def __init__(
        self,
        tenant_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Tenant id not found: {tenant_id!r}", details)
        self.tenant_id = tenant_id


class TenantLookupFailedError(LandlordError):
    """Raised for any other upstream failure.

    Covers transport errors, timeouts, non-2xx statuses other than the
    tenant-id ``404`` case, and malformed or incomplete response bodies.

    Attributes:
        key: The domain or tenant id being resolved (``None`` when unknown).
        cause: The underlying exception, when there is one.
    """

    def __init__(
        self,
        key: str | None = None,
        reason: str | None = None,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = "Tenant lookup failed"
        if key:
            message += f" for {key!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details)
        self.key = key
        self.reason = reason
        self.cause = cause


class LandlordNotAvailableError(LandlordError):
    """Raised when the directory service does not answer its ping endpoint.

    Attributes:
        endpoint: The configured directory base URL.
        cause: The underlying exception, when there is one.
    """

    def __init__(
        self,
        endpoint: str,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Landlord is not available at {endpoint!r}", details)
        self.endpoint = endpoint
        self.cause = cause


__all__ = [
    "CacheMissError",
    "ConfigurationError",
    "InvalidArgumentError",
    "LandlordError",
    "LandlordNotAvailableError",
    "TenantIdNotFoundError",
    "TenantLookupFailedError",
    "TenantNotFoundError",
]
