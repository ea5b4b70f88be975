"""Utility functions for the arbitrage tracker."""

from arbitrage_tracker.utils.time import (
    LatencyTimer,
    format_duration_us,
    format_timestamp_us,
    get_timestamp_us,
)


__all__ = [
    "LatencyTimer",
    "format_duration_us",
    "format_timestamp_us",
    "get_timestamp_us",
]
