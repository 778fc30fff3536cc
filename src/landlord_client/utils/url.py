"""Tenant URL construction."""

from __future__ import annotations


def build_tenant_url(domain: str, is_http_site: bool) -> str:
    """Return the canonical base URL for a tenant.

    Normalisation is purely textual: trailing slashes are stripped from
    *domain*, the scheme is chosen from *is_http_site*, and exactly one
    trailing slash is appended.  No DNS or URL validation happens here.

    Examples::

        build_tenant_url("brightspace.localhost/", True)   # "http://brightspace.localhost/"
        build_tenant_url("school.example.com", False)      # "https://school.example.com/"
    """
    scheme = "http" if is_http_site else "https"
    return f"{scheme}://{domain.rstrip('/')}/"


__all__ = ["build_tenant_url"]
