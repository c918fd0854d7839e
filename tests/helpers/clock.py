"""Manually advanced clock for meter and sample tests."""


class FakeClock:
    """Callable returning a time that only moves when told to."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
