"""
High-precision time utilities.

Provides microsecond-precision timestamps for samples, events and
latency measurement.
"""

import time
from datetime import UTC, datetime
from typing import Literal


def get_timestamp_us() -> int:
    """
    Get current timestamp in microseconds.

    Uses time.time_ns() for maximum precision, then converts to microseconds.

    Returns:
        Current Unix timestamp in microseconds.
    """
    return time.time_ns() // 1000


def format_timestamp_us(
    timestamp_us: int,
    include_date: bool = False,
    precision: Literal["seconds", "micros"] = "micros",
) -> str:
    """
    Format microsecond timestamp for logs and display.

    Args:
        timestamp_us: Timestamp in microseconds.
        include_date: Whether to include the date portion.
        precision: "seconds" drops the fractional part.

    Returns:
        Formatted UTC timestamp string.

    Example:
        >>> format_timestamp_us(1704067200123456)
        '00:00:00.123456'
        >>> format_timestamp_us(1704067200123456, precision="seconds")
        '00:00:00'
        >>> format_timestamp_us(1704067200123456, include_date=True)
        '2024-01-01 00:00:00.123456'
    """
    seconds = timestamp_us // 1_000_000
    microseconds = timestamp_us % 1_000_000

    dt = datetime.fromtimestamp(seconds, tz=UTC)
    text = dt.strftime("%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S")

    if precision == "seconds":
        return text
    return f"{text}.{microseconds:06d}"


class LatencyTimer:
    """
    Context manager measuring elapsed time on the monotonic clock.

    Example:
        >>> with LatencyTimer() as timer:
        ...     await fanout.fetch()
        >>> timer.latency_us
    """

    __slots__ = ("_start_ns", "latency_us")

    def __init__(self) -> None:
        self._start_ns = 0
        self.latency_us = 0

    def __enter__(self) -> "LatencyTimer":
        self._start_ns = time.perf_counter_ns()
        return self

    def __exit__(self, *args: object) -> None:
        self.latency_us = (time.perf_counter_ns() - self._start_ns) // 1000


def format_duration_us(duration_us: int | float) -> str:
    """
    Format a duration in microseconds for human-readable display.

    Examples:
        >>> format_duration_us(500)
        '500μs'
        >>> format_duration_us(1500)
        '1.50ms'
        >>> format_duration_us(1500000)
        '1.50s'
    """
    if duration_us < 1000:
        return f"{duration_us:.0f}μs"
    elif duration_us < 1_000_000:
        return f"{duration_us / 1000:.2f}ms"
    else:
        return f"{duration_us / 1_000_000:.2f}s"
