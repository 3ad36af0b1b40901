"""Vote ledger module."""

from voteboard.votes.ledger import VoteLedger


__all__ = ["VoteLedger"]
