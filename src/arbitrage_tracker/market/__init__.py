"""Market data module for quote acquisition and history."""

from arbitrage_tracker.market.fanout import QuoteFanout
from arbitrage_tracker.market.history import HistorySnapshot, HistoryStore


__all__ = [
    "HistorySnapshot",
    "HistoryStore",
    "QuoteFanout",
]
