"""
Concurrent multi-source quote acquisition.

Requests every configured source at once under a single deadline and
retries the whole set as a unit when any request fails or the deadline
elapses.
"""

import asyncio
import logging
from collections.abc import Mapping

from arbitrage_tracker.config.constants import (
    DEFAULT_FANOUT_RETRIES,
    DEFAULT_FANOUT_TIMEOUT_MS,
    MIN_SOURCES,
)
from arbitrage_tracker.core.exceptions import (
    FanoutExhaustedError,
    FanoutTimeoutError,
    SourceError,
    TrackerError,
)
from arbitrage_tracker.core.types import Quote, QuoteSource
from arbitrage_tracker.telemetry.metrics import MetricsCollector
from arbitrage_tracker.utils.time import LatencyTimer


logger = logging.getLogger(__name__)


class QuoteFanout:
    """
    Fetches one quote per source concurrently.

    Features:
    - One asyncio task per source, all started together
    - Overall deadline per attempt, not per source
    - Pending requests cancelled as soon as an attempt fails
    - Whole-set retry with a fixed budget
    - Results in configured source order, never arrival order
    """

    def __init__(
        self,
        sources: Mapping[str, QuoteSource],
        timeout_ms: int = DEFAULT_FANOUT_TIMEOUT_MS,
        retries: int = DEFAULT_FANOUT_RETRIES,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize fan-out.

        Args:
            sources: Ordered mapping of source name to the source serving it.
            timeout_ms: Deadline for one attempt in milliseconds.
            retries: Extra attempts after the first one.
            metrics: Optional collector for attempt counters and latency.
        """
        if len(sources) < MIN_SOURCES:
            raise ValueError(f"At least {MIN_SOURCES} sources are required, got {len(sources)}")
        if timeout_ms <= 0:
            raise ValueError(f"Timeout must be positive: {timeout_ms}")
        if retries < 0:
            raise ValueError(f"Retries cannot be negative: {retries}")

        self._sources = dict(sources)
        self._timeout_s = timeout_ms / 1000
        self._max_attempts = 1 + retries
        self._metrics = metrics

    @property
    def source_names(self) -> list[str]:
        """Get source names in request order."""
        return list(self._sources)

    @property
    def max_attempts(self) -> int:
        """Get attempts per fetch, first try included."""
        return self._max_attempts

    async def fetch(self) -> list[Quote]:
        """
        Fetch one quote per source, retrying on failure.

        Returns:
            Quotes in source order.

        Raises:
            FanoutExhaustedError: If every attempt failed or timed out.
        """
        attempt = 0

        while True:
            attempt += 1
            self._count("fanout_attempts")

            try:
                with LatencyTimer() as timer:
                    quotes = await self._attempt()
            except SourceError as e:
                self._count("source_errors")
                error: TrackerError = e
            except FanoutTimeoutError as e:
                self._count("fanout_timeouts")
                error = e
            else:
                if self._metrics:
                    self._metrics.record_latency("fanout", timer.latency_us)
                return quotes

            if attempt >= self._max_attempts:
                raise FanoutExhaustedError(attempt, error)

            self._count("fanout_retries")
            logger.warning(
                f"Fan-out attempt {attempt}/{self._max_attempts} failed: {error}, retrying"
            )

    async def _attempt(self) -> list[Quote]:
        """Run a single fan-out attempt under the deadline."""
        tasks = [
            asyncio.create_task(self._fetch_one(name, source), name=f"quote:{name}")
            for name, source in self._sources.items()
        ]

        try:
            done, pending = await asyncio.wait(
                tasks,
                timeout=self._timeout_s,
                return_when=asyncio.FIRST_EXCEPTION,
            )
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        # A failure wins over a timeout: report the source that broke
        for task in tasks:
            if task in done:
                error = task.exception()
                if error is not None:
                    raise error

        if pending:
            names = [name for name, task in zip(self._sources, tasks) if task in pending]
            raise FanoutTimeoutError(self._timeout_s, names)

        return [task.result() for task in tasks]

    async def _fetch_one(self, name: str, source: QuoteSource) -> Quote:
        """Fetch a single quote, normalizing failures to SourceError."""
        try:
            quote = await source.get_price(name)
            if not isinstance(quote, Quote):
                raise SourceError(name, f"expected a Quote, got {type(quote).__name__}")
            if quote.source != name:
                raise SourceError(name, f"quote labelled {quote.source!r}")
        except SourceError:
            raise
        except Exception as e:
            raise SourceError(name, f"{type(e).__name__}: {e}") from e

        return quote

    def _count(self, name: str) -> None:
        if self._metrics:
            self._metrics.increment_counter(name)
