"""Voting engine facade wiring the components over one storage adapter."""

import time
from collections.abc import Callable, Iterable

import structlog

from voteboard.groups.index import GroupIndex
from voteboard.items.repository import ItemRepository
from voteboard.models import Item, RankingBasis, VoteOutcome
from voteboard.observability.metrics import EngineMetrics
from voteboard.ranking.index import RankingIndex
from voteboard.settings import EngineSettings
from voteboard.store.adapter import StorageAdapter
from voteboard.store.redis_storage import RedisStorage
from voteboard.votes.ledger import VoteLedger


logger = structlog.get_logger()


class VotingEngine:
    """Public entry point: submit, vote, page and group_page.

    Holds no mutable state of its own; every call goes to the storage
    adapter, so one engine can serve any number of concurrent callers.
    Storage failures propagate unchanged.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        settings: EngineSettings | None = None,
        clock: Callable[[], float] | None = None,
        metrics: EngineMetrics | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            storage: Storage adapter shared by all components.
            settings: Engine settings.
            clock: Time source in seconds since epoch.
            metrics: Optional metrics instance.
        """
        self._storage = storage
        self._settings = settings or EngineSettings()
        clock = clock or time.time
        metrics = metrics or EngineMetrics.get_instance()

        self.items = ItemRepository(storage, self._settings, clock, metrics)
        self.votes = VoteLedger(storage, self._settings, clock, metrics)
        self.ranking = RankingIndex(storage, self._settings)
        self.groups = GroupIndex(storage, self.ranking, self._settings, metrics)

    @classmethod
    def from_settings(cls, settings: EngineSettings | None = None) -> "VotingEngine":
        """Create an engine backed by Redis.

        Args:
            settings: Engine settings (loaded from the environment if omitted).

        Returns:
            Engine using a RedisStorage adapter.
        """
        settings = settings or EngineSettings()
        logger.info(
            "engine_created",
            backend="redis",
            redis_db=settings.redis_db,
        )
        return cls(RedisStorage.from_settings(settings), settings)

    @property
    def settings(self) -> EngineSettings:
        """Get the engine settings."""
        return self._settings

    @property
    def storage(self) -> StorageAdapter:
        """Get the storage adapter."""
        return self._storage

    def close(self) -> None:
        """Release the storage adapter."""
        self._storage.close()

    def __enter__(self) -> "VotingEngine":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def submit(self, author: str, title: str, link: str) -> int:
        """Submit an item; returns its ID."""
        return self.items.submit(author, title, link)

    def vote(self, user: str, item_id: int) -> VoteOutcome:
        """Vote for an item."""
        return self.votes.vote(user, item_id)

    def get_item(self, item_id: int) -> Item:
        """Get an item by ID."""
        return self.items.get(item_id)

    def page(
        self,
        basis: RankingBasis = RankingBasis.SCORE,
        page_number: int = 1,
        page_size: int | None = None,
    ) -> list[Item]:
        """Get a page of the global ranking."""
        return self.ranking.page(basis, page_number, page_size)

    def add_to_group(self, item_id: int, group: str) -> bool:
        """Add an item to a group."""
        return self.groups.add_to_group(item_id, group)

    def add_to_groups(self, item_id: int, groups: Iterable[str]) -> int:
        """Add an item to several groups."""
        return self.groups.add_to_groups(item_id, groups)

    def group_page(
        self,
        group: str,
        basis: RankingBasis = RankingBasis.SCORE,
        page_number: int = 1,
        page_size: int | None = None,
    ) -> list[Item]:
        """Get a page of a group's cached ranking."""
        return self.groups.group_page(group, basis, page_number, page_size)
