from .ttl_cache import CacheEntry, TTLCache, epoch_ms

__all__ = ["CacheEntry", "TTLCache", "epoch_ms"]
