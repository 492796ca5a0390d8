"""In-process TTL cache for plan-registry lookups.

Plan limits change only when the catalog is re-synced, so every request
that gates on a feature limit can reuse the last lookup for a short window
instead of re-reading ``subscription_plans``.
"""

import time
from collections.abc import Hashable
from typing import Any

_cache: dict[Hashable, tuple[float, Any]] = {}

# Default TTL in seconds
DEFAULT_TTL = 60


def get(key: Hashable, ttl: float = DEFAULT_TTL) -> Any | None:
    """Return cached value if present and not expired, else None."""
    entry = _cache.get(key)
    if entry is None:
        return None
    stored_at, value = entry
    if time.monotonic() - stored_at > ttl:
        _cache.pop(key, None)
        return None
    return value


def put(key: Hashable, value: Any) -> None:
    _cache[key] = (time.monotonic(), value)


def invalidate_prefix(prefix: Hashable) -> None:
    """Drop every tuple key whose first element equals ``prefix``."""
    for key in [k for k in _cache if isinstance(k, tuple) and k and k[0] == prefix]:
        _cache.pop(key, None)


def clear() -> None:
    _cache.clear()
