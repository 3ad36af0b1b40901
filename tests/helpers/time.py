"""Shared, deterministic clocks for tests."""

# Fixed epoch second so scores and voting windows are reproducible.
FIXED_NOW = 1_500_000_000

ONE_WEEK = 7 * 24 * 3600


class FakeClock:
    """Manually advanced time source, callable like ``time.time``."""

    def __init__(self, now: float = FIXED_NOW) -> None:
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        """Move time forward."""
        self.now += seconds
