"""Data models shared by the voting engine components."""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


# Fields every stored item hash carries.
HASH_FIELDS = ("title", "link", "author", "time", "votes")


class RankingBasis(str, Enum):
    """Ordering used by global and group rankings.

    - score: creation time boosted by accumulated votes
    - time: creation time only (chronological)
    """

    SCORE = "score"
    TIME = "time"


class VoteOutcome(str, Enum):
    """Result of a vote attempt.

    - ACCEPTED: vote recorded, score and vote count incremented
    - REJECTED_EXPIRED: item unknown, removed, or older than the voting window
    - REJECTED_DUPLICATE: user already voted for this item
    """

    ACCEPTED = "ACCEPTED"
    REJECTED_EXPIRED = "REJECTED_EXPIRED"
    REJECTED_DUPLICATE = "REJECTED_DUPLICATE"

    @property
    def accepted(self) -> bool:
        """Whether the vote changed the item's score."""
        return self is VoteOutcome.ACCEPTED


class Item(BaseModel):
    """Submitted content item.

    Stored as a hash keyed by ``item:<id>``. The creation timestamp is set
    once at submission; only the vote count changes afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[int, Field(ge=1, description="Monotonic item identifier")]
    title: Annotated[str, Field(min_length=1, description="Item title")]
    link: Annotated[str, Field(min_length=1, description="Item link")]
    author: Annotated[str, Field(min_length=1, description="Submitting user")]
    created_at: Annotated[
        int, Field(ge=0, description="Creation time in seconds since epoch")
    ]
    votes: Annotated[int, Field(ge=1, description="Vote count incl. author")]

    @staticmethod
    def is_complete(data: Mapping[str, str]) -> bool:
        """Whether a stored hash holds every item field.

        A hash left behind by a counter increment on a removed item only
        has a ``votes`` field and does not describe an item.
        """
        return all(field in data for field in HASH_FIELDS)

    @classmethod
    def from_hash(cls, item_id: int, data: Mapping[str, str]) -> "Item":
        """Build an item from its stored hash fields.

        Args:
            item_id: Item identifier.
            data: Field mapping as returned by the storage adapter.

        Returns:
            The parsed item.
        """
        return cls(
            id=item_id,
            title=data["title"],
            link=data["link"],
            author=data["author"],
            created_at=int(float(data["time"])),
            votes=int(data["votes"]),
        )

    def to_hash(self) -> dict[str, str]:
        """Convert to the stored hash representation.

        Returns:
            Field mapping without the identifier (it lives in the key).
        """
        return {
            "title": self.title,
            "link": self.link,
            "author": self.author,
            "time": str(self.created_at),
            "votes": str(self.votes),
        }
