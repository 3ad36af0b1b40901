"""Domain exceptions for the voting engine.

This module defines a hierarchy of exceptions separating input validation
failures from storage infrastructure failures. Vote rejections are not
errors; they are returned as ``VoteOutcome`` values.
"""


class VoteboardError(Exception):
    """Base exception for all voting engine errors."""


class InvalidInputError(VoteboardError):
    """Raised when an operation receives malformed input.

    Raised before any storage interaction takes place.
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize the error.

        Args:
            field: Name of the offending argument.
            message: Human-readable description of the problem.
        """
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class ItemNotFoundError(VoteboardError):
    """Raised when a requested item record does not exist."""

    def __init__(self, item_id: int) -> None:
        """Initialize the error with the missing item ID.

        Args:
            item_id: The item ID that was not found.
        """
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class StorageError(VoteboardError):
    """Base exception for failures reported by the storage adapter."""


class StorageUnavailableError(StorageError):
    """Raised when the storage engine is unreachable or times out.

    This is the only failure kind that crosses the storage adapter boundary.
    """

    def __init__(self, operation: str, message: str = "storage unavailable") -> None:
        """Initialize the error.

        Args:
            operation: Adapter operation that failed.
            message: Human-readable error message.
        """
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")
