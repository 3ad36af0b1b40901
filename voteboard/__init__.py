"""Time-decayed content ranking and voting engine backed by Redis.

Items are ranked by ``creation time + base weight + votes x vote weight``;
each user votes at most once per item inside a one-week window, and group
rankings are served from short-lived cached intersections.
"""

from voteboard.engine import VotingEngine
from voteboard.errors import (
    InvalidInputError,
    ItemNotFoundError,
    StorageError,
    StorageUnavailableError,
    VoteboardError,
)
from voteboard.models import Item, RankingBasis, VoteOutcome
from voteboard.settings import EngineSettings, get_settings


__version__ = "0.1.0"

__all__ = [
    # Engine
    "VotingEngine",
    # Models
    "Item",
    "RankingBasis",
    "VoteOutcome",
    # Settings
    "EngineSettings",
    "get_settings",
    # Errors
    "InvalidInputError",
    "ItemNotFoundError",
    "StorageError",
    "StorageUnavailableError",
    "VoteboardError",
]
