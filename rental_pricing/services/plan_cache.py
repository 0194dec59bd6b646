from threading import RLock
from typing import Hashable, Optional

from cachetools import LRUCache

from rental_pricing.config.settings import get_settings
from rental_pricing.schemas import BestRateResult

_lock = RLock()
_cache: Optional[LRUCache] = None


def _get_cache() -> Optional[LRUCache]:
    global _cache
    with _lock:
        if _cache is None:
            size = get_settings().rate_plan_cache_size
            if size <= 0:
                return None
            _cache = LRUCache(maxsize=size)
        return _cache


def get_cached(key: Hashable) -> Optional[BestRateResult]:
    cache = _get_cache()
    if cache is None:
        return None
    with _lock:
        return cache.get(key)


def put_cached(key: Hashable, value: BestRateResult) -> None:
    cache = _get_cache()
    if cache is None:
        return
    with _lock:
        cache[key] = value


def clear() -> None:
    global _cache
    with _lock:
        _cache = None


def is_enabled() -> bool:
    return _get_cache() is not None
