"""Unit tests for the group index."""

import pytest

from tests.helpers.time import FakeClock
from voteboard.errors import InvalidInputError
from voteboard.groups.index import GroupIndex
from voteboard.items.repository import ItemRepository
from voteboard.models import RankingBasis
from voteboard.observability.metrics import EngineMetrics
from voteboard.ranking.index import RankingIndex
from voteboard.settings import EngineSettings
from voteboard.store.memory import MemoryStorage
from voteboard.votes.ledger import VoteLedger


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def storage(clock: FakeClock) -> MemoryStorage:
    """Create an empty memory store."""
    return MemoryStorage(clock=clock)


@pytest.fixture
def metrics() -> EngineMetrics:
    """Create an isolated metrics instance."""
    return EngineMetrics()


@pytest.fixture
def settings() -> EngineSettings:
    """Create default settings."""
    return EngineSettings()


@pytest.fixture
def repo(
    storage: MemoryStorage,
    settings: EngineSettings,
    clock: FakeClock,
    metrics: EngineMetrics,
) -> ItemRepository:
    """Create an item repository."""
    return ItemRepository(storage, settings, clock=clock, metrics=metrics)


@pytest.fixture
def ledger(
    storage: MemoryStorage,
    settings: EngineSettings,
    clock: FakeClock,
    metrics: EngineMetrics,
) -> VoteLedger:
    """Create a vote ledger."""
    return VoteLedger(storage, settings, clock=clock, metrics=metrics)


@pytest.fixture
def groups(
    storage: MemoryStorage, settings: EngineSettings, metrics: EngineMetrics
) -> GroupIndex:
    """Create a group index."""
    return GroupIndex(storage, RankingIndex(storage, settings), settings, metrics)


class TestMembership:
    """Tests for group membership."""

    def test_add_is_idempotent(self, groups: GroupIndex) -> None:
        """Test re-adding a member is not an error."""
        assert groups.add_to_group(1, "g") is True
        assert groups.add_to_group(1, "g") is False
        assert groups.is_member(1, "g")

    def test_add_to_groups(self, groups: GroupIndex) -> None:
        """Test adding to several groups counts new memberships."""
        groups.add_to_group(1, "a")
        assert groups.add_to_groups(1, ["a", "b", "c"]) == 2
        assert all(groups.is_member(1, g) for g in ("a", "b", "c"))

    def test_invalid_group_name(self, groups: GroupIndex) -> None:
        """Test empty group names are rejected."""
        with pytest.raises(InvalidInputError):
            groups.add_to_group(1, "")


class TestGroupPage:
    """Tests for group_page."""

    def test_only_members_in_rank_order(
        self,
        repo: ItemRepository,
        ledger: VoteLedger,
        groups: GroupIndex,
        clock: FakeClock,
    ) -> None:
        """Test results are a subset of the group ordered by the basis."""
        first = repo.submit("alice", "One", "https://example.com/1")
        clock.advance(60)
        outsider = repo.submit("alice", "Two", "https://example.com/2")
        clock.advance(60)
        third = repo.submit("alice", "Three", "https://example.com/3")
        ledger.vote("bob", first)
        groups.add_to_groups(first, ["g"])
        groups.add_to_groups(third, ["g"])

        by_score = groups.group_page("g", RankingBasis.SCORE)
        by_time = groups.group_page("g", RankingBasis.TIME)

        assert [item.id for item in by_score] == [first, third]
        assert [item.id for item in by_time] == [third, first]
        assert outsider not in {item.id for item in by_score}

    def test_cache_is_built_with_ttl(
        self,
        repo: ItemRepository,
        groups: GroupIndex,
        storage: MemoryStorage,
        clock: FakeClock,
        metrics: EngineMetrics,
    ) -> None:
        """Test a miss materializes the cache key, which expires after 60s."""
        item_id = repo.submit("alice", "One", "https://example.com/1")
        groups.add_to_group(item_id, "g")

        groups.group_page("g")
        assert storage.exists("score:g")
        assert metrics.to_dict()["group_cache_misses_total"] == 1

        clock.advance(60)
        assert not storage.exists("score:g")

    def test_cached_page_is_identical_within_ttl(
        self,
        repo: ItemRepository,
        ledger: VoteLedger,
        groups: GroupIndex,
        clock: FakeClock,
        metrics: EngineMetrics,
    ) -> None:
        """Test repeated calls within the TTL return identical items."""
        older = repo.submit("alice", "Old", "https://example.com/1")
        clock.advance(60)
        newer = repo.submit("alice", "New", "https://example.com/2")
        groups.add_to_groups(older, ["g"])
        groups.add_to_groups(newer, ["g"])

        before = groups.group_page("g")
        ledger.vote("bob", older)
        clock.advance(30)
        during = groups.group_page("g")

        assert [item.id for item in before] == [newer, older]
        assert during == before
        assert during[1].votes == 1
        assert metrics.to_dict()["group_cache_hits_total"] == 1

        clock.advance(30)
        after = groups.group_page("g")
        assert [item.id for item in after] == [older, newer]
        assert after[0].votes == 2

    def test_snapshot_shares_cache_ttl(
        self,
        repo: ItemRepository,
        groups: GroupIndex,
        storage: MemoryStorage,
        clock: FakeClock,
    ) -> None:
        """Test the captured item records live exactly as long as the cache."""
        item_id = repo.submit("alice", "One", "https://example.com/1")
        groups.add_to_group(item_id, "g")

        groups.group_page("g")
        assert storage.hash_get("items:score:g", f"item:{item_id}") is not None

        clock.advance(59)
        assert storage.exists("items:score:g")
        clock.advance(1)
        assert not storage.exists("items:score:g")

    def test_rebuild_replaces_previous_snapshot(
        self,
        repo: ItemRepository,
        groups: GroupIndex,
        storage: MemoryStorage,
        clock: FakeClock,
    ) -> None:
        """Test a rebuild drops records of members no longer cached."""
        item_id = repo.submit("alice", "One", "https://example.com/1")
        groups.add_to_group(item_id, "g")
        storage.hash_write("items:score:g", {"item:999": "{}"})
        storage.expire("items:score:g", 600)

        groups.group_page("g")

        assert storage.hash_get("items:score:g", "item:999") is None

    def test_removed_member_is_skipped(
        self,
        repo: ItemRepository,
        ledger: VoteLedger,
        groups: GroupIndex,
        storage: MemoryStorage,
    ) -> None:
        """Test a member whose item hash was removed is left out of the page."""
        kept = repo.submit("alice", "Kept", "https://example.com/1")
        removed = repo.submit("alice", "Removed", "https://example.com/2")
        groups.add_to_groups(kept, ["g"])
        groups.add_to_groups(removed, ["g"])
        storage.expire(f"item:{removed}", 0)
        ledger.vote("bob", removed)

        assert [item.id for item in groups.group_page("g")] == [kept]
        assert storage.hash_get("items:score:g", f"item:{removed}") is None

    def test_new_members_appear_after_ttl(
        self,
        repo: ItemRepository,
        groups: GroupIndex,
        clock: FakeClock,
    ) -> None:
        """Test membership changes are picked up on rebuild."""
        first = repo.submit("alice", "One", "https://example.com/1")
        groups.add_to_group(first, "g")
        groups.group_page("g")

        second = repo.submit("alice", "Two", "https://example.com/2")
        groups.add_to_group(second, "g")
        assert [item.id for item in groups.group_page("g")] == [first]

        clock.advance(60)
        assert {item.id for item in groups.group_page("g")} == {first, second}

    def test_empty_group(self, groups: GroupIndex, metrics: EngineMetrics) -> None:
        """Test an unknown group yields an empty page and no cache entry."""
        assert groups.group_page("nobody") == []
        assert groups.group_page("nobody") == []
        assert metrics.to_dict()["group_cache_misses_total"] == 2

    def test_bases_are_cached_separately(
        self,
        repo: ItemRepository,
        groups: GroupIndex,
        storage: MemoryStorage,
    ) -> None:
        """Test score and time caches use distinct keys."""
        item_id = repo.submit("alice", "One", "https://example.com/1")
        groups.add_to_group(item_id, "g")

        groups.group_page("g", RankingBasis.TIME)

        assert storage.exists("time:g")
        assert not storage.exists("score:g")

    def test_pagination(self, repo: ItemRepository, groups: GroupIndex, clock: FakeClock) -> None:
        """Test group pages are paginated like global pages."""
        ids = []
        for n in range(3):
            ids.append(repo.submit("alice", f"Item {n}", f"https://example.com/{n}"))
            groups.add_to_group(ids[-1], "g")
            clock.advance(1)

        page_two = groups.group_page("g", RankingBasis.TIME, 2, 2)
        assert [item.id for item in page_two] == [ids[0]]

    def test_rejects_invalid_paging(self, groups: GroupIndex) -> None:
        """Test invalid paging is rejected before touching the cache."""
        with pytest.raises(InvalidInputError):
            groups.group_page("g", RankingBasis.SCORE, 0)
        with pytest.raises(InvalidInputError):
            groups.group_page("g", RankingBasis.SCORE, 1, 0)
