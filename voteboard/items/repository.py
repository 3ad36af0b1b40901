"""Item repository: submission and lookup of content items."""

import time
from collections.abc import Callable

import structlog

from voteboard.errors import ItemNotFoundError
from voteboard.models import Item
from voteboard.observability.metrics import EngineMetrics
from voteboard.settings import EngineSettings
from voteboard.store import keys
from voteboard.store.adapter import StorageAdapter
from voteboard.validation import require_positive, require_text


logger = structlog.get_logger()


class ItemRepository:
    """Creates items and initializes their ranking entries.

    A submission writes five structures: the ID counter, the vote record
    (author only, expiring with the voting window), the item hash, and one
    entry in each global ranking.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        settings: EngineSettings | None = None,
        clock: Callable[[], float] | None = None,
        metrics: EngineMetrics | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            storage: Storage adapter.
            settings: Engine settings (weights and voting window).
            clock: Time source in seconds since epoch.
            metrics: Optional metrics instance.
        """
        self._storage = storage
        self._settings = settings or EngineSettings()
        self._clock = clock or time.time
        self._metrics = metrics or EngineMetrics.get_instance()
        self._log = logger.bind(component="items")

    def submit(self, author: str, title: str, link: str) -> int:
        """Submit a new item.

        The author is recorded as having voted, so a later self-vote is
        rejected as a duplicate.

        Args:
            author: Submitting user.
            title: Item title.
            link: Item link.

        Returns:
            The new item ID.

        Raises:
            InvalidInputError: If any argument is empty.
        """
        require_text("author", author)
        require_text("title", title)
        require_text("link", link)

        item_id = self._storage.next_id(keys.ITEM_COUNTER)

        voted = keys.vote_record_key(item_id)
        self._storage.set_add(voted, author)
        self._storage.expire(voted, self._settings.voting_window_seconds)

        now = int(self._clock())
        item = Item(
            id=item_id,
            title=title,
            link=link,
            author=author,
            created_at=now,
            votes=1,
        )
        member = keys.item_key(item_id)
        self._storage.hash_write(member, item.to_hash())

        self._storage.ordered_insert(
            keys.SCORE_RANKING, member, now + self._settings.base_weight
        )
        self._storage.ordered_insert(keys.TIME_RANKING, member, now)

        self._metrics.record_item_submitted()
        self._log.info(
            "item_submitted",
            item_id=item_id,
            author=author,
            created_at=now,
        )
        return item_id

    def find(self, item_id: int) -> Item | None:
        """Look up an item.

        Args:
            item_id: Item identifier.

        Returns:
            The item, or None if its hash does not exist or is incomplete.
        """
        require_positive("item_id", item_id)
        data = self._storage.hash_read(keys.item_key(item_id))
        if not data:
            return None
        if not Item.is_complete(data):
            self._log.warning("item_hash_incomplete", item_id=item_id, fields=sorted(data))
            return None
        return Item.from_hash(item_id, data)

    def get(self, item_id: int) -> Item:
        """Get an item that must exist.

        Raises:
            ItemNotFoundError: If the item hash does not exist.
        """
        item = self.find(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item
