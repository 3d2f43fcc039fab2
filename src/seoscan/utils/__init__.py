"""
Utilities Package.

Numeric conversions shared by the provider normalization and scoring code,
and URL helpers shared by the fetcher, facets and service layer.
"""

from .numbers import (
    round_half_up,
    round_to,
    bytes_to_mb,
    ms_to_seconds,
    to_percent,
)

from .urls import (
    resolve_url,
    hostname_of,
    is_same_host,
    normalize_target_url,
    truncate,
)

__all__ = [
    # Numbers
    "round_half_up",
    "round_to",
    "bytes_to_mb",
    "ms_to_seconds",
    "to_percent",
    # URLs
    "resolve_url",
    "hostname_of",
    "is_same_host",
    "normalize_target_url",
    "truncate",
]
