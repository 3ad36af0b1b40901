"""Group index: membership and cached per-group rankings."""

from collections.abc import Iterable

import structlog

from voteboard.models import Item, RankingBasis
from voteboard.observability.metrics import EngineMetrics
from voteboard.ranking.index import RankingIndex
from voteboard.settings import EngineSettings
from voteboard.store import keys
from voteboard.store.adapter import StorageAdapter
from voteboard.validation import require_positive, require_text


logger = structlog.get_logger()


class GroupIndex:
    """Maintains groups and serves group rankings from short-lived caches.

    A group page is read from ``<ranking><group>`` (e.g. ``score:news``).
    When that key is absent it is rebuilt as the MAX-aggregated intersection
    of the group set with the global ranking and given a fixed TTL in the
    same atomic step. The item records of its members are captured into
    ``items:<ranking><group>`` with the same TTL, so a cached page keeps
    both its order and its item attributes until it expires. Concurrent
    misses may rebuild the same keys; the last write wins.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        ranking: RankingIndex,
        settings: EngineSettings | None = None,
        metrics: EngineMetrics | None = None,
    ) -> None:
        """Initialize the group index.

        Args:
            storage: Storage adapter.
            ranking: Ranking index used to page cached rankings.
            settings: Engine settings (cache TTL, page size).
            metrics: Optional metrics instance.
        """
        self._storage = storage
        self._ranking = ranking
        self._settings = settings or EngineSettings()
        self._metrics = metrics or EngineMetrics.get_instance()
        self._log = logger.bind(component="groups")

    def add_to_group(self, item_id: int, group: str) -> bool:
        """Add an item to a group. Idempotent.

        Returns:
            True if the item was not already a member.
        """
        require_positive("item_id", item_id)
        require_text("group", group)
        added = self._storage.set_add(keys.group_key(group), keys.item_key(item_id))
        self._log.info("group_member_added", item_id=item_id, group=group, new=added)
        return added

    def add_to_groups(self, item_id: int, groups: Iterable[str]) -> int:
        """Add an item to several groups.

        Returns:
            Number of groups the item newly joined.
        """
        return sum(self.add_to_group(item_id, group) for group in groups)

    def is_member(self, item_id: int, group: str) -> bool:
        """Check group membership."""
        require_positive("item_id", item_id)
        require_text("group", group)
        return self._storage.set_contains(keys.group_key(group), keys.item_key(item_id))

    def group_page(
        self,
        group: str,
        basis: RankingBasis = RankingBasis.SCORE,
        page_number: int = 1,
        page_size: int | None = None,
    ) -> list[Item]:
        """Get one page of a group's ranking.

        Args:
            group: Group name.
            basis: Score or time ordering.
            page_number: One-based page number.
            page_size: Items per page (default from settings).

        Returns:
            Group members in rank order as captured at the last rebuild, so
            unchanged for up to the cache TTL.
        """
        require_text("group", group)
        require_positive("page_number", page_number)
        if page_size is not None:
            require_positive("page_size", page_size)

        cache_key = keys.group_cache_key(group, basis)
        snapshot_key = keys.group_snapshot_key(group, basis)
        if self._storage.exists(cache_key):
            self._metrics.record_group_cache_hit()
            self._log.debug("group_cache_hit", group=group, basis=basis.value)
        else:
            self._rebuild(group, basis, cache_key, snapshot_key)

        return self._ranking.page_ranking(
            cache_key, page_number, page_size, snapshot=snapshot_key
        )

    def _rebuild(
        self, group: str, basis: RankingBasis, cache_key: str, snapshot_key: str
    ) -> None:
        ttl = self._settings.group_cache_ttl_seconds
        members = self._storage.intersect_ordered(
            cache_key,
            [keys.group_key(group), keys.ranking_key(basis)],
            aggregate="MAX",
            ttl=ttl,
        )
        captured = self._capture(cache_key, snapshot_key, ttl) if members else 0
        self._metrics.record_group_cache_miss()
        self._log.info(
            "group_cache_rebuilt",
            group=group,
            basis=basis.value,
            members=members,
            captured=captured,
            ttl_seconds=ttl,
        )

    def _capture(self, cache_key: str, snapshot_key: str, ttl: int) -> int:
        """Store the item records of every cached member next to the cache.

        Pages served from the cache then return the records as they were at
        rebuild time until both keys expire.

        Returns:
            Number of records captured.
        """
        records: dict[str, str] = {}
        for member in self._storage.ordered_range_desc(cache_key, 0, -1):
            item = self._ranking.read_item(member, cache_key)
            if item is not None:
                records[member] = item.model_dump_json()

        self._storage.expire(snapshot_key, 0)
        if records:
            self._storage.hash_write(snapshot_key, records)
            self._storage.expire(snapshot_key, ttl)
        return len(records)
