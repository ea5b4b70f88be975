"""
In-memory metrics for the tracker.

Counts fan-out attempts, retries and failures, keeps rolling latency
windows per pipeline stage and aggregates tick and detection results.
"""

import time
from collections import Counter, deque
from dataclasses import asdict, dataclass

from arbitrage_tracker.config.constants import LATENCY_WINDOW_SIZE


@dataclass(frozen=True)
class LatencyStats:
    """Aggregated latency statistics, all values in microseconds."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p95_us: int = 0
    p99_us: int = 0
    count: int = 0


class LatencyWindow:
    """Most recent latency samples of one stage."""

    __slots__ = ("_samples",)

    def __init__(self, size: int) -> None:
        self._samples: deque[int] = deque(maxlen=size)

    def add(self, latency_us: int) -> None:
        self._samples.append(latency_us)

    def stats(self) -> LatencyStats:
        """Nearest-rank percentiles over the window."""
        if not self._samples:
            return LatencyStats()

        ranked = sorted(self._samples)
        n = len(ranked)

        def rank(q: float) -> int:
            return ranked[min(n - 1, int(n * q))]

        return LatencyStats(
            min_us=ranked[0],
            max_us=ranked[-1],
            avg_us=sum(ranked) / n,
            p50_us=rank(0.50),
            p95_us=rank(0.95),
            p99_us=rank(0.99),
            count=n,
        )


@dataclass
class TrackerStats:
    """Tick and detection statistics."""

    ticks_completed: int = 0
    ticks_failed: int = 0
    opportunities_found: int = 0
    records_persisted: int = 0
    persistence_failures: int = 0
    best_spread_pct: float = 0.0
    last_spread_pct: float | None = None

    @property
    def total_ticks(self) -> int:
        """Ticks attempted, completed or abandoned."""
        return self.ticks_completed + self.ticks_failed

    @property
    def tick_success_rate(self) -> float:
        """Share of ticks that produced a sample."""
        total = self.total_ticks
        return self.ticks_completed / total if total > 0 else 0.0

    @property
    def opportunity_rate(self) -> float:
        """Share of completed ticks flagged as opportunities."""
        if self.ticks_completed == 0:
            return 0.0
        return self.opportunities_found / self.ticks_completed


class MetricsCollector:
    """
    Single sink for the tracker's counters, latencies and tick results.

    Counter names used by the pipeline:
    ``ticks``, ``fanout_attempts``, ``fanout_retries``,
    ``fanout_timeouts`` and ``source_errors``.
    Latency stages: ``fanout`` (successful attempts) and ``tick``.
    """

    def __init__(self, latency_window_size: int = LATENCY_WINDOW_SIZE) -> None:
        """
        Initialize an empty collector.

        Args:
            latency_window_size: Samples kept per latency stage.
        """
        self._window_size = latency_window_size
        self._windows: dict[str, LatencyWindow] = {}
        self._counters: Counter[str] = Counter()
        self._stats = TrackerStats()
        self._started = time.monotonic()

    def record_latency(self, name: str, latency_us: int) -> None:
        """Add one latency sample to the ``name`` stage."""
        window = self._windows.get(name)
        if window is None:
            window = self._windows[name] = LatencyWindow(self._window_size)
        window.add(latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        self._counters[name] += value

    def get_counter(self, name: str) -> int:
        return self._counters[name]

    def record_tick(self, spread_pct: float | None, opportunity: bool) -> None:
        """
        Record a completed tick.

        Args:
            spread_pct: The tick's spread, None if undefined.
            opportunity: Whether the tick was flagged.
        """
        stats = self._stats
        stats.ticks_completed += 1
        stats.last_spread_pct = spread_pct
        if spread_pct is not None:
            stats.best_spread_pct = max(stats.best_spread_pct, spread_pct)
        if opportunity:
            stats.opportunities_found += 1

    def record_tick_failure(self) -> None:
        """Record an abandoned tick."""
        self._stats.ticks_failed += 1

    def record_persistence(self, success: bool) -> None:
        """Record whether an opportunity reached durable storage."""
        if success:
            self._stats.records_persisted += 1
        else:
            self._stats.persistence_failures += 1

    def get_latency_stats(self, name: str) -> LatencyStats:
        window = self._windows.get(name)
        return window.stats() if window else LatencyStats()

    def get_all_latency_stats(self) -> dict[str, LatencyStats]:
        return {name: window.stats() for name, window in self._windows.items()}

    @property
    def stats(self) -> TrackerStats:
        """Get tick statistics."""
        return self._stats

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started

    def to_dict(self) -> dict[str, object]:
        """Export everything as plain JSON-compatible data."""
        stats = self._stats
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: asdict(latency) for name, latency in self.get_all_latency_stats().items()
            },
            "ticks": {
                "completed": stats.ticks_completed,
                "failed": stats.ticks_failed,
                "success_rate": stats.tick_success_rate,
                "opportunities_found": stats.opportunities_found,
                "opportunity_rate": stats.opportunity_rate,
                "records_persisted": stats.records_persisted,
                "persistence_failures": stats.persistence_failures,
                "best_spread_pct": stats.best_spread_pct,
                "last_spread_pct": stats.last_spread_pct,
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._windows.clear()
        self._counters.clear()
        self._stats = TrackerStats()
        self._started = time.monotonic()
