"""Vote ledger: one vote per user per item inside the voting window."""

import math
import time
from collections.abc import Callable

import structlog

from voteboard.models import VoteOutcome
from voteboard.observability.metrics import EngineMetrics
from voteboard.settings import EngineSettings
from voteboard.store import keys
from voteboard.store.adapter import StorageAdapter
from voteboard.validation import require_positive, require_text


logger = structlog.get_logger()


class VoteLedger:
    """Records votes and applies their score increments.

    Freshness is judged from the time ranking, never from the vote record's
    own expiry. De-duplication relies solely on the atomic set add: the score
    and vote count increments run only after the add reports a new member,
    so concurrent identical votes increment at most once.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        settings: EngineSettings | None = None,
        clock: Callable[[], float] | None = None,
        metrics: EngineMetrics | None = None,
    ) -> None:
        """Initialize the ledger.

        Args:
            storage: Storage adapter.
            settings: Engine settings (vote weight and voting window).
            clock: Time source in seconds since epoch.
            metrics: Optional metrics instance.
        """
        self._storage = storage
        self._settings = settings or EngineSettings()
        self._clock = clock or time.time
        self._metrics = metrics or EngineMetrics.get_instance()
        self._log = logger.bind(component="votes")

    def vote(self, user: str, item_id: int) -> VoteOutcome:
        """Cast a vote.

        Args:
            user: Voting user.
            item_id: Item being voted for.

        Returns:
            ACCEPTED, REJECTED_EXPIRED or REJECTED_DUPLICATE.

        Raises:
            InvalidInputError: If the user is empty or the item ID invalid.
        """
        require_text("user", user)
        require_positive("item_id", item_id)

        member = keys.item_key(item_id)
        window = self._settings.voting_window_seconds
        now = self._clock()

        created_at = self._storage.ordered_score(keys.TIME_RANKING, member)
        if created_at is None or created_at < now - window:
            return self._reject(VoteOutcome.REJECTED_EXPIRED, user, item_id)
        # A ranked item whose hash was removed takes no votes.
        if not self._storage.exists(member):
            return self._reject(VoteOutcome.REJECTED_EXPIRED, user, item_id)

        voted = keys.vote_record_key(item_id)
        if not self._storage.set_add(voted, user):
            return self._reject(VoteOutcome.REJECTED_DUPLICATE, user, item_id)

        score = self._storage.ordered_increment(
            keys.SCORE_RANKING, member, self._settings.vote_weight
        )
        votes = self._storage.hash_increment(member, "votes", 1)

        # Keep the record's lifetime tied to the item's window even if
        # storage dropped it early and the add above recreated it.
        remaining = math.ceil(created_at + window - now)
        if remaining > 0:
            self._storage.expire(voted, remaining)

        self._metrics.record_vote(VoteOutcome.ACCEPTED.value)
        self._log.info(
            "vote_recorded",
            item_id=item_id,
            user=user,
            score=score,
            votes=votes,
        )
        return VoteOutcome.ACCEPTED

    def has_voted(self, user: str, item_id: int) -> bool:
        """Check whether a user is in an item's vote record.

        Diagnostic only; an expired record reports False for everyone.
        """
        require_text("user", user)
        require_positive("item_id", item_id)
        return self._storage.set_contains(keys.vote_record_key(item_id), user)

    def _reject(self, outcome: VoteOutcome, user: str, item_id: int) -> VoteOutcome:
        self._metrics.record_vote(outcome.value)
        self._log.info(
            "vote_rejected",
            item_id=item_id,
            user=user,
            outcome=outcome.value,
        )
        return outcome
