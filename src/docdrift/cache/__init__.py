"""Cache module - content-addressed reuse of per-package results."""

from docdrift.cache.hasher import diff_hashes, hash_file, hash_files, hash_string
from docdrift.cache.spec_cache import CACHE_VERSION, CacheEntry, SpecCache, load_spec_cache, save_spec_cache

__all__ = [
    "CACHE_VERSION",
    "CacheEntry",
    "SpecCache",
    "diff_hashes",
    "hash_file",
    "hash_files",
    "hash_string",
    "load_spec_cache",
    "save_spec_cache",
]
