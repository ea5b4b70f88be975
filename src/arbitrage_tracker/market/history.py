"""
Bounded in-memory history.

Keeps the rolling price-sample buffer used for charting and the log of
recent opportunities shown on the dashboard.
"""

import threading
from collections import deque
from dataclasses import dataclass

from arbitrage_tracker.config.constants import (
    DEFAULT_HISTORY_SIZE,
    DEFAULT_OPPORTUNITY_LOG_SIZE,
)
from arbitrage_tracker.core.types import OpportunityEvent, Sample


@dataclass(slots=True, frozen=True)
class HistorySnapshot:
    """
    Consistent read-only view of the history store.

    ``samples`` run oldest to newest, ``opportunities`` newest to oldest.
    ``total_opportunities`` counts every event ever recorded, including
    those already evicted from the log.
    """

    samples: tuple[Sample, ...]
    opportunities: tuple[OpportunityEvent, ...]
    total_opportunities: int

    @property
    def opportunity_count(self) -> int:
        """Number of events currently in the log."""
        return len(self.opportunities)

    @property
    def latest_sample(self) -> Sample | None:
        """Most recent sample, if any."""
        return self.samples[-1] if self.samples else None


class HistoryStore:
    """
    Fixed-capacity sample buffer and opportunity log.

    Features:
    - Deque-backed ring buffers with oldest-first eviction
    - One lock around each tick's update, so readers never see
      a sample without its event
    - Copy-on-read snapshots for the dashboard
    """

    __slots__ = ("_samples", "_opportunities", "_total_opportunities", "_lock")

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY_SIZE,
        opportunity_log_size: int = DEFAULT_OPPORTUNITY_LOG_SIZE,
    ) -> None:
        """
        Initialize empty history.

        Args:
            history_size: Maximum number of samples kept.
            opportunity_log_size: Maximum number of events kept.
        """
        if history_size < 1 or opportunity_log_size < 1:
            raise ValueError("History capacities must be positive")

        self._samples: deque[Sample] = deque(maxlen=history_size)
        # Newest at the left; appendleft on a full deque drops the right end
        self._opportunities: deque[OpportunityEvent] = deque(maxlen=opportunity_log_size)
        self._total_opportunities = 0
        self._lock = threading.Lock()

    def record(self, sample: Sample, event: OpportunityEvent | None = None) -> None:
        """
        Apply one tick's updates.

        Args:
            sample: The tick's complete sample.
            event: The tick's opportunity, if it was one.
        """
        with self._lock:
            self._samples.append(sample)
            if event is not None:
                self._opportunities.appendleft(event)
                self._total_opportunities += 1

    def snapshot(self) -> HistorySnapshot:
        """Get a consistent copy of both collections."""
        with self._lock:
            return HistorySnapshot(
                samples=tuple(self._samples),
                opportunities=tuple(self._opportunities),
                total_opportunities=self._total_opportunities,
            )

    def clear(self) -> None:
        """Drop all samples and events."""
        with self._lock:
            self._samples.clear()
            self._opportunities.clear()
            self._total_opportunities = 0

    @property
    def history_size(self) -> int:
        """Get the sample buffer capacity."""
        return self._samples.maxlen or 0

    @property
    def opportunity_log_size(self) -> int:
        """Get the opportunity log capacity."""
        return self._opportunities.maxlen or 0

    @property
    def sample_count(self) -> int:
        """Get the number of buffered samples."""
        return len(self._samples)

    @property
    def opportunity_count(self) -> int:
        """Get the number of events in the log."""
        return len(self._opportunities)

    def __len__(self) -> int:
        return len(self._samples)
