"""Redis adapter – key-value store backend."""
from flagkeeper.adapters.redis.store import RedisKeyValueStore, escape_glob

__all__ = ["RedisKeyValueStore", "escape_glob"]
