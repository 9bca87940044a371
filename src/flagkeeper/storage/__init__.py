"""Storage – key-value port, in-memory backend and partition actor."""
from flagkeeper.storage.in_memory import InMemoryKeyValueStore
from flagkeeper.storage.partition import DEFAULT_PARTITION, PartitionActor, PartitionRegistry
from flagkeeper.storage.port import KeyValueStore

__all__ = [
    "DEFAULT_PARTITION",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PartitionActor",
    "PartitionRegistry",
]
