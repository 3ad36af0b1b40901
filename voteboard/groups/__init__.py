"""Group membership and cached group rankings."""

from voteboard.groups.index import GroupIndex


__all__ = ["GroupIndex"]
