"""Storage adapters for items, vote records, rankings and groups.

This module provides:
- The StorageAdapter protocol the engine depends on
- RedisStorage, the production adapter over redis-py
- MemoryStorage, an in-process adapter with the same semantics
- Key naming shared by all components
"""

from voteboard.store.adapter import Aggregate, StorageAdapter
from voteboard.store.keys import (
    ITEM_COUNTER,
    SCORE_RANKING,
    TIME_RANKING,
    group_cache_key,
    group_key,
    group_snapshot_key,
    item_id_from_key,
    item_key,
    ranking_key,
    vote_record_key,
)
from voteboard.store.memory import MemoryStorage
from voteboard.store.redis_storage import RedisStorage


__all__ = [
    # Protocol
    "Aggregate",
    "StorageAdapter",
    # Adapters
    "MemoryStorage",
    "RedisStorage",
    # Keys
    "ITEM_COUNTER",
    "SCORE_RANKING",
    "TIME_RANKING",
    "group_cache_key",
    "group_key",
    "group_snapshot_key",
    "item_id_from_key",
    "item_key",
    "ranking_key",
    "vote_record_key",
]
