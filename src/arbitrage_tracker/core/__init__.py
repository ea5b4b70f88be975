"""Core module containing the scheduler, exceptions, and type definitions."""

from arbitrage_tracker.core.exceptions import (
    FanoutExhaustedError,
    FanoutTimeoutError,
    PersistenceError,
    SourceError,
    TrackerError,
)
from arbitrage_tracker.core.types import (
    OpportunityEvent,
    PersistenceSink,
    Quote,
    QuoteSource,
    Sample,
    TickOutcome,
)


__all__ = [
    "FanoutExhaustedError",
    "FanoutTimeoutError",
    "OpportunityEvent",
    "PersistenceError",
    "PersistenceSink",
    "Quote",
    "QuoteSource",
    "Sample",
    "SourceError",
    "TickOutcome",
    "TrackerError",
]
