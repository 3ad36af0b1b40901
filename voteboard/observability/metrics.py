"""Metrics for voting engine operations."""

from collections import Counter
from threading import Lock

from voteboard.models import VoteOutcome


class EngineMetrics:
    """Collects counters for submissions, votes, group caching and storage.

    Provides thread-safe counters for:
    - items_submitted_total
    - votes_accepted_total, votes_rejected_expired_total,
      votes_rejected_duplicate_total
    - group_cache_total{result}
    - storage_errors_total{operation}

    Metrics are designed to be exportable to Prometheus or similar systems.
    """

    _instance: "EngineMetrics | None" = None
    _lock = Lock()

    def __init__(self) -> None:
        """Initialize the metrics collector."""
        self._items_submitted = 0
        self._votes: Counter[str] = Counter()
        self._group_cache: Counter[str] = Counter()
        self._storage_errors: Counter[str] = Counter()
        self._lock = Lock()

    @classmethod
    def get_instance(cls) -> "EngineMetrics":
        """Get the singleton metrics instance.

        Returns:
            The shared EngineMetrics instance.
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing)."""
        with cls._lock:
            cls._instance = None

    def record_item_submitted(self) -> None:
        """Record a new item submission."""
        with self._lock:
            self._items_submitted += 1

    def record_vote(self, outcome: str) -> None:
        """Record a vote attempt.

        Args:
            outcome: VoteOutcome value of the attempt.
        """
        with self._lock:
            self._votes[outcome] += 1

    def record_group_cache_hit(self) -> None:
        """Record a group page served from a live cache entry."""
        with self._lock:
            self._group_cache["hit"] += 1

    def record_group_cache_miss(self) -> None:
        """Record a group page that rebuilt its cache entry."""
        with self._lock:
            self._group_cache["miss"] += 1

    def record_storage_error(self, operation: str) -> None:
        """Record a storage adapter failure.

        Args:
            operation: Adapter operation that failed.
        """
        with self._lock:
            self._storage_errors[operation] += 1

    @property
    def items_submitted_total(self) -> int:
        """Total number of submitted items."""
        return self._items_submitted

    def votes_total(self, outcome: str) -> int:
        """Get the vote count for an outcome.

        Args:
            outcome: VoteOutcome value.

        Returns:
            Number of votes recorded with that outcome.
        """
        with self._lock:
            return self._votes[outcome]

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Vote counts are exported per outcome as ``votes_accepted_total``,
        ``votes_rejected_expired_total`` and ``votes_rejected_duplicate_total``,
        with zeros for outcomes not seen yet.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            metrics: dict[str, object] = {
                "items_submitted_total": self._items_submitted,
            }
            for outcome in VoteOutcome:
                metrics[f"votes_{outcome.value.lower()}_total"] = self._votes[
                    outcome.value
                ]
            metrics["group_cache_hits_total"] = self._group_cache["hit"]
            metrics["group_cache_misses_total"] = self._group_cache["miss"]
            metrics["storage_errors_total"] = dict(self._storage_errors)
            return metrics
