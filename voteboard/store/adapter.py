"""Storage adapter protocol.

The engine reaches all shared state through this interface. Implementations
must make every single primitive atomic; ``set_add`` in particular is the
de-duplication gate for votes and must be a true add-if-absent.

Every method raises ``StorageUnavailableError`` when the underlying engine is
unreachable or a round trip times out.
"""

from collections.abc import Mapping, Sequence
from typing import Literal, Protocol


Aggregate = Literal["MAX", "MIN", "SUM"]


class StorageAdapter(Protocol):
    """Protocol for the key-value storage engine behind the voting engine."""

    def ping(self) -> bool:
        """Check that the engine is reachable."""
        ...

    def close(self) -> None:
        """Release connections held by the adapter."""
        ...

    def next_id(self, counter: str) -> int:
        """Atomically increment a counter and return the new value."""
        ...

    def set_add(self, key: str, member: str) -> bool:
        """Add a member to a set.

        Returns:
            True if the member was newly inserted.
        """
        ...

    def set_contains(self, key: str, member: str) -> bool:
        """Check set membership."""
        ...

    def hash_write(self, key: str, mapping: Mapping[str, str | int | float]) -> None:
        """Write fields of a hash."""
        ...

    def hash_read(self, key: str) -> dict[str, str]:
        """Read all fields of a hash (empty when the key is absent)."""
        ...

    def hash_get(self, key: str, field: str) -> str | None:
        """Read one hash field, or None when the field or key is absent."""
        ...

    def hash_increment(self, key: str, field: str, delta: int) -> int:
        """Atomically increment an integer hash field and return the result."""
        ...

    def ordered_insert(self, name: str, member: str, score: float) -> None:
        """Insert or overwrite a member of an ordered map."""
        ...

    def ordered_increment(self, name: str, member: str, delta: float) -> float:
        """Atomically add to a member's score and return the new score."""
        ...

    def ordered_score(self, name: str, member: str) -> float | None:
        """Return a member's score, or None when absent."""
        ...

    def ordered_range_desc(self, name: str, start: int, stop: int) -> list[str]:
        """Return members ranked ``start`` through ``stop`` (inclusive), highest first."""
        ...

    def intersect_ordered(
        self,
        dest: str,
        sources: Sequence[str],
        aggregate: Aggregate = "MAX",
        ttl: int | None = None,
    ) -> int:
        """Store the intersection of ``sources`` into ``dest``.

        Plain sets take part with a score of 1 per member. When ``ttl`` is
        given the destination expiry is applied in the same atomic step.

        Returns:
            Number of members in the destination.
        """
        ...

    def exists(self, key: str) -> bool:
        """Check whether a key exists (expired keys do not)."""
        ...

    def expire(self, key: str, seconds: int) -> bool:
        """Set a key's time to live.

        Returns:
            True if the key existed and the expiry was set.
        """
        ...
