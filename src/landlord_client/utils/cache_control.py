"""``Cache-Control`` header parsing.

Only the ``max-age`` directive matters to the client.  Parsing follows
RFC 9111 §5.2 loosely: directives are comma-separated, names are
case-insensitive, and values may be quoted.  Anything that does not yield a
non-negative integer ``max-age`` is reported as ``None`` so the caller skips
caching instead of computing a bogus expiry.
"""

from __future__ import annotations

import re

# token[=token|quoted-string], surrounded by optional whitespace.
_DIRECTIVE_RE = re.compile(r'^\s*([A-Za-z0-9!#$%&\'*+.^_`|~-]+)\s*(?:=\s*("[^"]*"|[^\s",]*))?\s*$')

# delta-seconds: ASCII digits only.
_DELTA_SECONDS_RE = re.compile(r"[0-9]+")

_MAX_HEADER_LEN: int = 4096


def _parse_directives(header: str) -> dict[str, str | None] | None:
    """Map lower-cased directive names to unquoted values, or ``None`` if invalid."""
    if len(header) > _MAX_HEADER_LEN:
        return None
    directives: dict[str, str | None] = {}
    for part in header.split(","):
        if not part.strip():
            continue
        match = _DIRECTIVE_RE.match(part)
        if match is None:
            return None
        name, value = match.group(1).lower(), match.group(2)
        if value is not None and value.startswith('"'):
            value = value[1:-1]
        directives[name] = value
    return directives


def parse_max_age(header: str | None) -> int | None:
    """Return the ``max-age`` of a ``Cache-Control`` header in seconds.

    Args:
        header: Raw header value, or ``None`` when the header was absent.

    Returns:
        The non-negative integer max-age, or ``None`` when the header is
        absent, oversized or malformed, or its ``max-age`` is missing or not
        a run of ASCII digits.

    Examples::

        parse_max_age("public, max-age=3600")  # 3600
        parse_max_age('max-age="60"')          # 60
        parse_max_age("max-age=1.5")           # None
    """
    if not header:
        return None
    directives = _parse_directives(header)
    if not directives:
        return None
    value = directives.get("max-age")
    if value is None or _DELTA_SECONDS_RE.fullmatch(value) is None:
        return None
    return int(value)


__all__ = ["parse_max_age"]
