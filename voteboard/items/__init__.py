"""Item repository module."""

from voteboard.items.repository import ItemRepository


__all__ = ["ItemRepository"]
