"""Input checks applied before any storage interaction."""

from voteboard.errors import InvalidInputError


def require_text(field: str, value: str) -> str:
    """Reject empty or whitespace-only text.

    Args:
        field: Argument name for the error message.
        value: Value to check.

    Returns:
        The value, unchanged.

    Raises:
        InvalidInputError: If the value is not a non-blank string.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(field, "must be a non-empty string")
    return value


def require_positive(field: str, value: int) -> int:
    """Reject non-integer or non-positive values.

    Raises:
        InvalidInputError: If the value is not an int >= 1.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInputError(field, f"must be a positive integer, got {value!r}")
    return value
