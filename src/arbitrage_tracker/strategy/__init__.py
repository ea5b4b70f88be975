"""Strategy module for spread detection."""

from arbitrage_tracker.strategy.detector import SpreadDetector, SpreadResult


__all__ = [
    "SpreadDetector",
    "SpreadResult",
]
