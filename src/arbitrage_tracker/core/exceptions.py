"""
Exception hierarchy for the tracker.

Every error here is recoverable at the tick boundary: the scheduler
logs it and continues with the next tick.
"""


class TrackerError(Exception):
    """Base exception for tracker errors."""


class SourceError(TrackerError):
    """A single quote source call failed."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class FanoutTimeoutError(TrackerError):
    """The fan-out deadline elapsed before every source responded."""

    def __init__(self, timeout_s: float, pending: list[str]) -> None:
        super().__init__(
            f"Fan-out timed out after {timeout_s * 1000:.0f}ms, pending: {', '.join(pending)}"
        )
        self.timeout_s = timeout_s
        self.pending = pending


class FanoutExhaustedError(TrackerError):
    """Every fan-out attempt failed; the tick is abandoned."""

    def __init__(self, attempts: int, last_error: TrackerError) -> None:
        super().__init__(f"Fan-out failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class PersistenceError(TrackerError):
    """A durable write failed."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Cannot append to {path}: {message}")
        self.path = path
