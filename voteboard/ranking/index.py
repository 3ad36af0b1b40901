"""Ranking index: paginated reads over the global score and time rankings."""

import structlog

from voteboard.models import Item, RankingBasis
from voteboard.settings import EngineSettings
from voteboard.store import keys
from voteboard.store.adapter import StorageAdapter
from voteboard.validation import require_positive


logger = structlog.get_logger()


class RankingIndex:
    """Serves pages of items from a ranking, highest first.

    The rankings themselves are written by the item repository (both) and
    the vote ledger (score only); this class only reads them.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        settings: EngineSettings | None = None,
    ) -> None:
        """Initialize the index.

        Args:
            storage: Storage adapter.
            settings: Engine settings (default page size).
        """
        self._storage = storage
        self._settings = settings or EngineSettings()
        self._log = logger.bind(component="ranking")

    def page(
        self,
        basis: RankingBasis,
        page_number: int = 1,
        page_size: int | None = None,
    ) -> list[Item]:
        """Get one page of the global ranking.

        Args:
            basis: Score or time ordering.
            page_number: One-based page number.
            page_size: Items per page (default from settings).

        Returns:
            Items in rank order.

        Raises:
            InvalidInputError: If page_number or page_size is below 1.
        """
        return self.page_ranking(keys.ranking_key(basis), page_number, page_size)

    def page_ranking(
        self,
        ranking: str,
        page_number: int = 1,
        page_size: int | None = None,
        snapshot: str | None = None,
    ) -> list[Item]:
        """Get one page of any ranking keyed by item members.

        Covers the half-open rank range
        ``[(page_number - 1) * page_size, page_number * page_size)``. Members
        whose item hash no longer exists, or lacks item fields, are left out
        of the page.

        Args:
            ranking: Storage key of the ranking.
            page_number: One-based page number.
            page_size: Items per page (default from settings).
            snapshot: Optional hash of JSON item records keyed by member.
                Records found there are returned as captured; other members
                are read from their live item hash.

        Returns:
            Items in rank order.
        """
        require_positive("page_number", page_number)
        size = require_positive(
            "page_size", page_size if page_size is not None else self._settings.page_size
        )

        start = (page_number - 1) * size
        members = self._storage.ordered_range_desc(ranking, start, start + size - 1)

        items: list[Item] = []
        for member in members:
            if snapshot is not None:
                captured = self._storage.hash_get(snapshot, member)
                if captured is not None:
                    items.append(Item.model_validate_json(captured))
                    continue
            item = self.read_item(member, ranking)
            if item is not None:
                items.append(item)
        return items

    def read_item(self, member: str, ranking: str) -> Item | None:
        """Resolve a ranking member to its live item record.

        Args:
            member: Item key from the ranking.
            ranking: Ranking the member came from, for logging.

        Returns:
            The item, or None if its hash is missing or incomplete.
        """
        data = self._storage.hash_read(member)
        if not Item.is_complete(data):
            self._log.warning(
                "ranked_item_missing",
                ranking=ranking,
                member=member,
                fields=sorted(data),
            )
            return None
        return Item.from_hash(keys.item_id_from_key(member), data)

    def score_of(self, item_id: int) -> float | None:
        """Current score of an item, or None if it is not ranked."""
        require_positive("item_id", item_id)
        return self._storage.ordered_score(keys.SCORE_RANKING, keys.item_key(item_id))

    def created_at_of(self, item_id: int) -> int | None:
        """Creation timestamp from the time ranking, or None if not ranked."""
        require_positive("item_id", item_id)
        created_at = self._storage.ordered_score(
            keys.TIME_RANKING, keys.item_key(item_id)
        )
        return None if created_at is None else int(created_at)
