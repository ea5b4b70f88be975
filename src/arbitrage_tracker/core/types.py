"""
Type definitions for the arbitrage tracker.

This module contains the dataclasses and Protocol definitions used
throughout the application. Market entities are frozen: a quote, sample
or event is never changed after creation, collections only append and
evict.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Protocol

from arbitrage_tracker.config.constants import RECORD_PREFIX, SPREAD_DECIMALS
from arbitrage_tracker.utils.time import format_timestamp_us


# =============================================================================
# Market Data Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Quote:
    """One source's reported price at fetch time."""

    source: str
    price: float


@dataclass(slots=True, frozen=True)
class Sample:
    """
    One tick's complete set of quotes.

    Holds exactly one price per configured source, keyed in source order.
    """

    timestamp_us: int
    prices: Mapping[str, float]

    @classmethod
    def from_quotes(cls, timestamp_us: int, quotes: Sequence[Quote]) -> "Sample":
        """Build a sample from an ordered quote collection."""
        prices = {quote.source: quote.price for quote in quotes}
        if len(prices) != len(quotes):
            raise ValueError(f"Duplicate source in quotes: {[q.source for q in quotes]}")
        return cls(timestamp_us=timestamp_us, prices=MappingProxyType(prices))

    @property
    def sources(self) -> tuple[str, ...]:
        """Source names in configured order."""
        return tuple(self.prices)

    @property
    def time_label(self) -> str:
        """Wall-clock label used on the chart axis."""
        return format_timestamp_us(self.timestamp_us, precision="seconds")

    def to_dict(self) -> dict[str, object]:
        """Serializable form: timestamp, label and per-source prices."""
        return {
            "timestamp_us": self.timestamp_us,
            "time": self.time_label,
            "prices": dict(self.prices),
        }


# =============================================================================
# Opportunity Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class OpportunityEvent:
    """A tick whose spread exceeded the configured threshold."""

    timestamp_us: int
    high_source: str
    low_source: str
    spread_pct: float

    @property
    def record(self) -> str:
        """Persisted line format, kept stable for downstream parsers."""
        return (
            f"{RECORD_PREFIX} {self.high_source} vs {self.low_source} "
            f"| Spread: {self.spread_pct:.{SPREAD_DECIMALS}f}%"
        )

    @property
    def display(self) -> str:
        """Record prefixed with its wall-clock time, as shown on the dashboard."""
        return f"{format_timestamp_us(self.timestamp_us, precision='seconds')}: {self.record}"

    def to_dict(self) -> dict[str, object]:
        """Serializable form of the event."""
        return {
            "timestamp_us": self.timestamp_us,
            "high_source": self.high_source,
            "low_source": self.low_source,
            "spread_pct": self.spread_pct,
            "message": self.display,
        }


@dataclass(slots=True, frozen=True)
class TickOutcome:
    """Result of one completed tick."""

    sample: Sample
    spread_pct: float | None
    event: OpportunityEvent | None = None
    persisted: bool = False

    @property
    def is_opportunity(self) -> bool:
        """Check if the tick produced an opportunity."""
        return self.event is not None


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class QuoteSource(Protocol):
    """Protocol for price providers."""

    async def get_price(self, source: str) -> Quote:
        """
        Get the current price quoted by ``source``.

        Raises:
            SourceError: If the price cannot be obtained.
        """
        ...


class PersistenceSink(Protocol):
    """Protocol for durable opportunity storage."""

    async def append(self, record: str) -> None:
        """
        Append one record to durable storage.

        Raises:
            PersistenceError: If the write fails.
        """
        ...
