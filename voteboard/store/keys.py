"""Key naming for everything the engine keeps in storage.

Ranking members are item keys (``item:<id>``), so a ranking entry resolves
directly to the item hash.
"""

from voteboard.errors import InvalidInputError
from voteboard.models import RankingBasis


ITEM_COUNTER = "item:"
SCORE_RANKING = "score:"
TIME_RANKING = "time:"

_ITEM_PREFIX = "item:"
_VOTED_PREFIX = "voted:"
_GROUP_PREFIX = "group:"
_SNAPSHOT_PREFIX = "items:"

_RANKING_KEYS: dict[RankingBasis, str] = {
    RankingBasis.SCORE: SCORE_RANKING,
    RankingBasis.TIME: TIME_RANKING,
}


def item_key(item_id: int) -> str:
    """Key of the item hash, also used as the item's ranking member."""
    return f"{_ITEM_PREFIX}{item_id}"


def item_id_from_key(key: str) -> int:
    """Parse the item ID back out of an item key.

    Args:
        key: Item key such as ``item:42``.

    Returns:
        The numeric item ID.

    Raises:
        InvalidInputError: If the key is not an item key.
    """
    prefix, _, raw_id = key.partition(":")
    if f"{prefix}:" != _ITEM_PREFIX or not raw_id.isdigit():
        raise InvalidInputError("item key", f"not an item key: {key!r}")
    return int(raw_id)


def vote_record_key(item_id: int) -> str:
    """Key of the set of users who voted for an item."""
    return f"{_VOTED_PREFIX}{item_id}"


def group_key(group: str) -> str:
    """Key of a group's membership set."""
    return f"{_GROUP_PREFIX}{group}"


def ranking_key(basis: RankingBasis) -> str:
    """Key of the global ranking for a basis."""
    return _RANKING_KEYS[basis]


def group_cache_key(group: str, basis: RankingBasis) -> str:
    """Key of the cached group ranking for a basis (e.g. ``score:news``)."""
    return f"{ranking_key(basis)}{group}"


def group_snapshot_key(group: str, basis: RankingBasis) -> str:
    """Key of the item records captured with a group cache (e.g. ``items:score:news``).

    The hash maps each cached member to its item record serialized as JSON
    at rebuild time and shares the cache's TTL.
    """
    return f"{_SNAPSHOT_PREFIX}{group_cache_key(group, basis)}"
