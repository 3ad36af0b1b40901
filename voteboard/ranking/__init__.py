"""Global ranking module."""

from voteboard.ranking.index import RankingIndex


__all__ = ["RankingIndex"]
