from cargo_check_i18n.cache.engine import get_engine
from cargo_check_i18n.cache.helpers import CACHE_FILE_NAME, compute_fingerprint, default_cache_path
from cargo_check_i18n.cache.memory import InMemoryCacheStore
from cargo_check_i18n.cache.sqlite import SqliteCacheStore

__all__ = [
    "CACHE_FILE_NAME",
    "InMemoryCacheStore",
    "SqliteCacheStore",
    "compute_fingerprint",
    "default_cache_path",
    "get_engine",
]
