"""
Main tracker engine.

Drives the sampling pipeline on a fixed cadence: fan-out, spread
detection, history update and persistence, one tick at a time.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping

from arbitrage_tracker.config.settings import Settings
from arbitrage_tracker.core.exceptions import FanoutExhaustedError, PersistenceError
from arbitrage_tracker.core.types import (
    OpportunityEvent,
    PersistenceSink,
    QuoteSource,
    Sample,
    TickOutcome,
)
from arbitrage_tracker.market.fanout import QuoteFanout
from arbitrage_tracker.market.history import HistoryStore
from arbitrage_tracker.persistence.trade_log import TradeLogSink, format_record
from arbitrage_tracker.simulation.market import build_sources
from arbitrage_tracker.strategy.detector import SpreadDetector
from arbitrage_tracker.telemetry.metrics import MetricsCollector
from arbitrage_tracker.telemetry.reporter import SessionReporter
from arbitrage_tracker.utils.time import LatencyTimer, get_timestamp_us


logger = logging.getLogger(__name__)


class TrackerEngine:
    """
    Tick scheduler and owner of the tracker state.

    Manages:
    - Quote fan-out across the configured sources
    - Spread detection
    - The bounded history shared with the dashboard
    - Opportunity persistence
    - Metrics and session reporting

    Ticks never overlap: a tick, retries included, finishes before the
    next one starts, and tick starts are at least one interval apart.
    """

    def __init__(
        self,
        settings: Settings,
        sources: Mapping[str, QuoteSource] | None = None,
        sink: PersistenceSink | None = None,
        clock: Callable[[], int] = get_timestamp_us,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Application settings.
            sources: Source name to quote source; simulated when omitted.
                Must cover every configured source name.
            sink: Opportunity storage; the trade log file when omitted.
            clock: Timestamp provider in microseconds.
        """
        self._settings = settings
        self._clock = clock
        self._running = False
        self._shutdown_event = asyncio.Event()

        available = sources if sources is not None else build_sources(settings)
        missing = [name for name in settings.sources if name not in available]
        if missing:
            raise ValueError(f"No quote source for: {', '.join(missing)}")
        self._sources = {name: available[name] for name in settings.sources}

        self._metrics = MetricsCollector()
        self._reporter = SessionReporter(self._metrics, symbol=settings.symbol)
        self._fanout = QuoteFanout(
            self._sources,
            timeout_ms=settings.fanout_timeout_ms,
            retries=settings.fanout_retries,
            metrics=self._metrics,
        )
        self._detector = SpreadDetector(threshold_pct=settings.spread_threshold_pct)
        self._history = HistoryStore(
            history_size=settings.history_size,
            opportunity_log_size=settings.opportunity_log_size,
        )
        self._sink: PersistenceSink = sink or TradeLogSink(settings.trade_log_path)

    async def tick(self) -> TickOutcome | None:
        """
        Run one full pipeline pass.

        Returns:
            The tick outcome, or None if the fan-out was exhausted and
            the tick abandoned.
        """
        self._metrics.increment_counter("ticks")

        with LatencyTimer() as timer:
            try:
                quotes = await self._fanout.fetch()
            except FanoutExhaustedError as e:
                self._metrics.record_tick_failure()
                logger.warning(f"Tick abandoned: {e}")
                return None

            timestamp = self._clock()
            sample = Sample.from_quotes(timestamp, quotes)
            result = self._detector.evaluate(quotes)
            event = result.to_event(timestamp) if result.is_opportunity else None

            self._history.record(sample, event)

            persisted = False
            if event is not None:
                logger.info(event.record)
                persisted = await self._persist(event)

            # After persistence: a tick is counted completed or failed, never both
            self._metrics.record_tick(result.spread_pct, event is not None)

        self._metrics.record_latency("tick", timer.latency_us)
        logger.debug(self._reporter.get_status_line())

        return TickOutcome(
            sample=sample,
            spread_pct=result.spread_pct,
            event=event,
            persisted=persisted,
        )

    async def _persist(self, event: OpportunityEvent) -> bool:
        """Hand an event to the sink; failures are logged, never raised."""
        try:
            await self._sink.append(format_record(event))
        except PersistenceError as e:
            self._metrics.record_persistence(success=False)
            logger.error(f"Opportunity not persisted: {e}")
            return False

        self._metrics.record_persistence(success=True)
        return True

    async def run(self) -> None:
        """
        Run ticks on the configured cadence until stop() is called.

        A stop requested before the loop starts is honored: the loop
        exits without ticking.
        """
        if self._running:
            raise RuntimeError("Engine is already running")

        self._running = True
        loop = asyncio.get_running_loop()
        interval = self._settings.tick_interval_seconds

        logger.info(
            f"Tracking {self._settings.symbol} across {', '.join(self._sources)} "
            f"every {interval:g}s (threshold {self._settings.spread_threshold_pct}%)"
        )

        try:
            while not self._shutdown_event.is_set():
                started = loop.time()

                try:
                    await self.tick()
                except Exception:
                    self._metrics.record_tick_failure()
                    logger.exception("Unexpected error during tick")

                delay = max(0.0, interval - (loop.time() - started))
                try:
                    await asyncio.wait_for(self._shutdown_event.wait(), timeout=delay)
                except TimeoutError:
                    pass
        finally:
            self._running = False
            logger.info("Tick loop stopped")

    def stop(self) -> None:
        """Request the tick loop to stop after the current tick."""
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """Stop ticking and release source resources."""
        logger.info("Shutting down engine...")
        self.stop()

        closed: set[int] = set()
        for source in self._sources.values():
            close = getattr(source, "close", None)
            if close is None or id(source) in closed:
                continue
            closed.add(id(source))
            result = close()
            if inspect.isawaitable(result):
                await result

        logger.info("Engine shutdown complete")

    @property
    def is_running(self) -> bool:
        """Check if the tick loop is running."""
        return self._running

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @property
    def source_names(self) -> list[str]:
        """Get source names in configured order."""
        return list(self._sources)

    @property
    def history(self) -> HistoryStore:
        """Get the history store shared with the dashboard."""
        return self._history

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector."""
        return self._metrics

    @property
    def reporter(self) -> SessionReporter:
        """Get session reporter."""
        return self._reporter
