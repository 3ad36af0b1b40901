"""In-process storage adapter.

Mirrors the Redis semantics the engine relies on: atomic primitives, lazy
key expiry, reverse-range tie ordering by member name, and plain sets taking
part in intersections with a score of 1.
"""

import threading
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import structlog

from voteboard.errors import StorageError
from voteboard.store.adapter import Aggregate


logger = structlog.get_logger()

_AGGREGATORS: dict[str, Callable[[float, float], float]] = {
    "MAX": max,
    "MIN": min,
    "SUM": lambda a, b: a + b,
}


class MemoryStorage:
    """Thread-safe dict-backed storage adapter.

    Every primitive runs under a single lock, so each call is atomic with
    respect to concurrent callers. Expiry is evaluated lazily against the
    injected clock, which lets tests move time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """Initialize an empty store.

        Args:
            clock: Time source in seconds since epoch (default: time.time).
        """
        self._clock = clock or time.time
        self._data: dict[str, object] = {}
        self._expires_at: dict[str, float] = {}
        self._lock = threading.RLock()
        self._log = logger.bind(component="store", backend="memory")

    def ping(self) -> bool:
        """Always reachable."""
        return True

    def close(self) -> None:
        """Nothing to release."""

    # ===== Internals =====

    def _purge_if_expired(self, key: str) -> None:
        """Drop a key whose expiry has passed.

        Must be called while holding the lock.
        """
        deadline = self._expires_at.get(key)
        if deadline is not None and deadline <= self._clock():
            self._data.pop(key, None)
            del self._expires_at[key]

    def _get(self, key: str, kind: type) -> Any:
        """Fetch a live value, checking its type.

        Must be called while holding the lock.
        """
        self._purge_if_expired(key)
        value = self._data.get(key)
        if value is not None and type(value) is not kind:
            msg = f"WRONGTYPE key {key!r} holds {type(value).__name__}"
            raise StorageError(msg)
        return value

    def _get_or_create(self, key: str, kind: type) -> Any:
        """Fetch a live value, creating an empty one when absent.

        Must be called while holding the lock.
        """
        value = self._get(key, kind)
        if value is None:
            value = kind()
            self._data[key] = value
        return value

    def _delete(self, key: str) -> None:
        """Must be called while holding the lock."""
        self._data.pop(key, None)
        self._expires_at.pop(key, None)

    # ===== Counters and keys =====

    def next_id(self, counter: str) -> int:
        """Atomically increment a counter and return the new value."""
        with self._lock:
            current = self._get(counter, int)
            value = (current or 0) + 1
            self._data[counter] = value
            return value

    def exists(self, key: str) -> bool:
        """Check whether a live key exists."""
        with self._lock:
            self._purge_if_expired(key)
            return key in self._data

    def expire(self, key: str, seconds: int) -> bool:
        """Set a key's time to live; non-positive values delete the key."""
        with self._lock:
            self._purge_if_expired(key)
            if key not in self._data:
                return False
            if seconds <= 0:
                self._delete(key)
            else:
                self._expires_at[key] = self._clock() + seconds
            return True

    # ===== Sets =====

    def set_add(self, key: str, member: str) -> bool:
        """Add a member; True if it was not already present."""
        with self._lock:
            members = self._get_or_create(key, set)
            if member in members:
                return False
            members.add(member)
            return True

    def set_contains(self, key: str, member: str) -> bool:
        """Check set membership."""
        with self._lock:
            members = self._get(key, set)
            return members is not None and member in members

    # ===== Hashes =====

    def hash_write(self, key: str, mapping: Mapping[str, str | int | float]) -> None:
        """Write fields of a hash, stringifying values."""
        with self._lock:
            fields = self._get_or_create(key, dict)
            fields.update({name: str(value) for name, value in mapping.items()})

    def hash_read(self, key: str) -> dict[str, str]:
        """Read a copy of all hash fields."""
        with self._lock:
            fields = self._get(key, dict)
            return dict(fields) if fields else {}

    def hash_get(self, key: str, field: str) -> str | None:
        """Read one hash field."""
        with self._lock:
            fields = self._get(key, dict)
            return None if fields is None else fields.get(field)

    def hash_increment(self, key: str, field: str, delta: int) -> int:
        """Atomically increment an integer hash field."""
        with self._lock:
            fields = self._get_or_create(key, dict)
            try:
                value = int(fields.get(field, "0")) + delta
            except ValueError as exc:
                msg = f"hash value at {key!r}.{field} is not an integer"
                raise StorageError(msg) from exc
            fields[field] = str(value)
            return value

    # ===== Ordered maps =====

    def _ordered(self, name: str) -> dict[str, float] | None:
        """Must be called while holding the lock."""
        return self._get(name, _OrderedMap)

    def ordered_insert(self, name: str, member: str, score: float) -> None:
        """Insert or overwrite a member's score."""
        with self._lock:
            scores = self._get_or_create(name, _OrderedMap)
            scores[member] = float(score)

    def ordered_increment(self, name: str, member: str, delta: float) -> float:
        """Atomically add to a member's score."""
        with self._lock:
            scores = self._get_or_create(name, _OrderedMap)
            scores[member] = scores.get(member, 0.0) + delta
            return scores[member]

    def ordered_score(self, name: str, member: str) -> float | None:
        """Return a member's score, or None."""
        with self._lock:
            scores = self._ordered(name)
            if scores is None:
                return None
            return scores.get(member)

    def ordered_range_desc(self, name: str, start: int, stop: int) -> list[str]:
        """Members ranked start..stop inclusive, highest score first.

        Equal scores are ordered by member name, descending, as Redis does
        for reverse ranges. Negative indices count from the end.
        """
        with self._lock:
            scores = self._ordered(name)
            if not scores:
                return []
            ranked = sorted(
                scores.items(), key=lambda entry: (entry[1], entry[0]), reverse=True
            )
            size = len(ranked)
            if start < 0:
                start = max(size + start, 0)
            if stop < 0:
                stop += size
            stop = min(stop, size - 1)
            if start > stop:
                return []
            return [member for member, _ in ranked[start : stop + 1]]

    def intersect_ordered(
        self,
        dest: str,
        sources: Sequence[str],
        aggregate: Aggregate = "MAX",
        ttl: int | None = None,
    ) -> int:
        """Store the aggregated intersection of sets and ordered maps."""
        combine = _AGGREGATORS[aggregate]
        with self._lock:
            weighted: list[dict[str, float]] = []
            for source in sources:
                self._purge_if_expired(source)
                value = self._data.get(source)
                if isinstance(value, _OrderedMap):
                    weighted.append(dict(value))
                elif isinstance(value, set):
                    weighted.append(dict.fromkeys(value, 1.0))
                elif value is None:
                    weighted.append({})
                else:
                    msg = f"WRONGTYPE key {source!r} holds {type(value).__name__}"
                    raise StorageError(msg)

            result = _OrderedMap()
            if weighted:
                common = set(weighted[0]).intersection(*weighted[1:])
                for member in common:
                    score = weighted[0][member]
                    for scores in weighted[1:]:
                        score = combine(score, scores[member])
                    result[member] = score

            self._delete(dest)
            if result:
                self._data[dest] = result
                if ttl is not None:
                    self._expires_at[dest] = self._clock() + ttl

            self._log.debug(
                "intersection_stored",
                dest=dest,
                sources=list(sources),
                aggregate=aggregate,
                members=len(result),
            )
            return len(result)


class _OrderedMap(dict[str, float]):
    """Marker type distinguishing ordered maps from hashes."""
