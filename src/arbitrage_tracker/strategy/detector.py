"""
Spread detection.

Ranks one tick's quotes, computes the relative spread between the best
and worst price and classifies the tick against a threshold.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from arbitrage_tracker.config.constants import DEFAULT_SPREAD_THRESHOLD_PCT, MIN_SOURCES
from arbitrage_tracker.core.types import OpportunityEvent, Quote


logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SpreadResult:
    """
    Classification of one quote set.

    ``spread_pct`` is None when the lowest price is not positive and the
    spread is therefore undefined.
    """

    high: Quote
    low: Quote
    spread_pct: float | None
    is_opportunity: bool

    def to_event(self, timestamp_us: int) -> OpportunityEvent:
        """Build the event for an opportunity result."""
        if not self.is_opportunity or self.spread_pct is None:
            raise ValueError("Only opportunity results can produce an event")

        return OpportunityEvent(
            timestamp_us=timestamp_us,
            high_source=self.high.source,
            low_source=self.low.source,
            spread_pct=self.spread_pct,
        )


class SpreadDetector:
    """
    Classifies quote sets as opportunities.

    Stateless: evaluating the same quotes twice gives the same result.
    """

    def __init__(self, threshold_pct: float = DEFAULT_SPREAD_THRESHOLD_PCT) -> None:
        """
        Initialize detector.

        Args:
            threshold_pct: Spread in percent a tick must exceed (strictly).
        """
        if threshold_pct < 0:
            raise ValueError(f"Threshold cannot be negative: {threshold_pct}")
        self._threshold_pct = threshold_pct

    @property
    def threshold_pct(self) -> float:
        """Get the opportunity threshold in percent."""
        return self._threshold_pct

    def evaluate(self, quotes: Sequence[Quote]) -> SpreadResult:
        """
        Rank quotes and classify the spread.

        Sorting is stable, so among equal prices the earlier source ranks
        higher and the later one lower.

        Args:
            quotes: One quote per source, in source order.

        Returns:
            SpreadResult with the highest and lowest quote.

        Raises:
            ValueError: If fewer than two quotes are given.
        """
        if len(quotes) < MIN_SOURCES:
            raise ValueError(f"Need at least {MIN_SOURCES} quotes, got {len(quotes)}")

        ranked = sorted(quotes, key=lambda q: q.price, reverse=True)
        high, low = ranked[0], ranked[-1]

        if low.price <= 0:
            logger.warning(f"Non-positive low quote {low.source}={low.price}, spread undefined")
            return SpreadResult(high=high, low=low, spread_pct=None, is_opportunity=False)

        spread_pct = (high.price - low.price) / low.price * 100

        return SpreadResult(
            high=high,
            low=low,
            spread_pct=spread_pct,
            is_opportunity=spread_pct > self._threshold_pct,
        )
