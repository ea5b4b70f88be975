"""
Integration tests for the tracker engine.

Tests the full tick pipeline and the scheduling loop with mock sources.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from arbitrage_tracker.config.settings import Settings
from arbitrage_tracker.core.engine import TrackerEngine
from arbitrage_tracker.utils.time import get_timestamp_us
from tests.mocks import (
    SOURCES,
    CrashingSink,
    FailingSink,
    MockQuoteSource,
    RecordingSink,
)


async def run_for(engine: TrackerEngine, seconds: float) -> None:
    """Run the engine loop for a while, then stop it."""
    task = asyncio.create_task(engine.run())
    await asyncio.sleep(seconds)
    engine.stop()
    await asyncio.wait_for(task, timeout=2.0)


class TestTick:
    """Tests for a single pipeline pass."""

    @pytest.mark.asyncio
    async def test_opportunity_tick(
        self, engine: TrackerEngine, recording_sink: RecordingSink
    ) -> None:
        """Test a wide spread is flagged, logged in history and persisted."""
        outcome = await engine.tick()

        assert outcome is not None
        assert outcome.event is not None
        assert outcome.event.high_source == "B"
        assert outcome.event.low_source == "C"
        assert outcome.spread_pct == pytest.approx(2.0202, abs=1e-4)
        assert outcome.persisted
        assert recording_sink.records == ["[PROFIT] B vs C | Spread: 2.020%"]

        snapshot = engine.history.snapshot()
        assert snapshot.samples == (outcome.sample,)
        assert snapshot.opportunities == (outcome.event,)
        assert dict(outcome.sample.prices) == {"A": 100.0, "B": 101.0, "C": 99.0, "D": 100.0}

    @pytest.mark.asyncio
    async def test_quiet_tick(
        self,
        engine: TrackerEngine,
        mock_source: MockQuoteSource,
        recording_sink: RecordingSink,
        quiet_prices: dict[str, float],
    ) -> None:
        """Test a narrow spread adds a sample and nothing else."""
        mock_source.prices = dict(quiet_prices)

        outcome = await engine.tick()

        assert outcome is not None
        assert not outcome.is_opportunity
        assert outcome.spread_pct == pytest.approx(0.01, abs=1e-6)
        assert recording_sink.records == []
        assert engine.history.sample_count == 1
        assert engine.history.opportunity_count == 0

    @pytest.mark.asyncio
    async def test_stalled_source_abandons_tick(
        self, engine: TrackerEngine, mock_source: MockQuoteSource
    ) -> None:
        """Test a source that never answers costs three attempts and no state change."""
        mock_source.hang = {"C"}

        outcome = await engine.tick()

        assert outcome is None
        assert mock_source.calls["C"] == 3
        assert engine.history.sample_count == 0
        assert engine.history.opportunity_count == 0
        assert engine.metrics.stats.ticks_failed == 1
        assert engine.metrics.get_counter("fanout_retries") == 2

    @pytest.mark.asyncio
    async def test_persistence_failure_keeps_event(
        self,
        settings: Settings,
        mock_source: MockQuoteSource,
        fixed_clock: Callable[[], int],
    ) -> None:
        """Test a failed write is reported but the event stays in history."""
        sink = FailingSink()
        engine = TrackerEngine(
            settings,
            sources={name: mock_source for name in SOURCES},
            sink=sink,
            clock=fixed_clock,
        )

        outcome = await engine.tick()

        assert outcome is not None
        assert outcome.is_opportunity
        assert not outcome.persisted
        assert sink.attempts == 1
        assert engine.history.opportunity_count == 1
        assert engine.metrics.stats.persistence_failures == 1

    @pytest.mark.asyncio
    async def test_bounded_history_and_trade_log(
        self,
        settings: Settings,
        mock_source: MockQuoteSource,
        fixed_clock: Callable[[], int],
    ) -> None:
        """Test memory stays bounded while the file keeps every record."""
        engine = TrackerEngine(
            settings,
            sources={name: mock_source for name in SOURCES},
            clock=fixed_clock,
        )

        for _ in range(25):
            await engine.tick()

        snapshot = engine.history.snapshot()
        assert len(snapshot.samples) == 20
        assert snapshot.opportunity_count == 10
        assert snapshot.total_opportunities == 25
        assert snapshot.opportunities[0].timestamp_us > snapshot.opportunities[-1].timestamp_us

        lines = Path(settings.trade_log_path).read_text(encoding="utf-8").splitlines()
        assert lines == ["[PROFIT] B vs C | Spread: 2.020%"] * 25

    @pytest.mark.asyncio
    async def test_simulated_sources_by_default(
        self, make_settings: Callable[..., Settings], recording_sink: RecordingSink
    ) -> None:
        """Test the engine falls back to simulated sources."""
        engine = TrackerEngine(make_settings(sim_seed=7), sink=recording_sink)

        outcome = await engine.tick()

        assert outcome is not None
        assert list(outcome.sample.prices) == SOURCES
        assert all(140.0 <= price <= 140.4 for price in outcome.sample.prices.values())


class TestEngineConfig:
    """Tests for engine construction and teardown."""

    def test_missing_source(self, settings: Settings, mock_source: MockQuoteSource) -> None:
        """Test every configured name needs a source."""
        with pytest.raises(ValueError, match="C, D"):
            TrackerEngine(settings, sources={"A": mock_source, "B": mock_source})

    def test_sources_follow_configured_order(
        self, settings: Settings, mock_source: MockQuoteSource
    ) -> None:
        """Test extra sources are ignored and order comes from settings."""
        sources = {name: mock_source for name in reversed(SOURCES)}
        sources["E"] = mock_source

        engine = TrackerEngine(settings, sources=sources)

        assert engine.source_names == SOURCES

    @pytest.mark.asyncio
    async def test_shutdown_closes_shared_source_once(
        self, engine: TrackerEngine, mock_source: MockQuoteSource
    ) -> None:
        """Test a source serving several names is closed once."""
        await engine.shutdown()

        assert mock_source.closed == 1


class TestRunLoop:
    """Tests for the scheduling loop."""

    @pytest.mark.asyncio
    async def test_run_and_stop(self, engine: TrackerEngine) -> None:
        """Test the loop ticks until stopped."""
        await run_for(engine, 0.3)

        assert not engine.is_running
        assert engine.metrics.stats.ticks_completed >= 2

    @pytest.mark.asyncio
    async def test_ticks_never_overlap(
        self,
        make_settings: Callable[..., Settings],
        opportunity_prices: dict[str, float],
        recording_sink: RecordingSink,
    ) -> None:
        """Test a slow fan-out delays the next tick instead of overlapping it."""
        source = MockQuoteSource(opportunity_prices, delays_ms={name: 80 for name in SOURCES})
        engine = TrackerEngine(
            make_settings(fanout_timeout_ms=1000),
            sources={name: source for name in SOURCES},
            sink=recording_sink,
        )

        await run_for(engine, 0.4)

        assert source.max_in_flight == 1
        assert engine.metrics.stats.ticks_completed >= 2

    @pytest.mark.asyncio
    async def test_tick_starts_spaced_by_interval(
        self,
        make_settings: Callable[..., Settings],
        mock_source: MockQuoteSource,
        recording_sink: RecordingSink,
    ) -> None:
        """Test fast ticks still wait out the interval."""
        settings = make_settings(tick_interval_seconds=0.1)
        engine = TrackerEngine(
            settings,
            sources={name: mock_source for name in SOURCES},
            sink=recording_sink,
            clock=get_timestamp_us,
        )

        await run_for(engine, 0.45)

        samples = engine.history.snapshot().samples
        assert 2 <= len(samples) <= 6
        gaps = [b.timestamp_us - a.timestamp_us for a, b in zip(samples, samples[1:])]
        assert all(gap >= 80_000 for gap in gaps)

    @pytest.mark.asyncio
    async def test_loop_survives_abandoned_ticks(
        self,
        make_settings: Callable[..., Settings],
        mock_source: MockQuoteSource,
        recording_sink: RecordingSink,
    ) -> None:
        """Test the loop keeps going after exhausted fan-outs and recovers."""
        engine = TrackerEngine(
            make_settings(fanout_timeout_ms=10, fanout_retries=0),
            sources={name: mock_source for name in SOURCES},
            sink=recording_sink,
        )
        mock_source.hang = {"A"}

        task = asyncio.create_task(engine.run())
        await asyncio.sleep(0.2)
        failed = engine.metrics.stats.ticks_failed
        mock_source.hang = set()
        await asyncio.sleep(0.2)
        engine.stop()
        await asyncio.wait_for(task, timeout=2.0)

        assert failed >= 2
        assert engine.metrics.stats.ticks_completed >= 1
        assert recording_sink.records

    @pytest.mark.asyncio
    async def test_loop_survives_unexpected_errors(
        self, settings: Settings, mock_source: MockQuoteSource
    ) -> None:
        """Test an unexpected exception fails one tick, not the loop."""
        sink = CrashingSink()
        engine = TrackerEngine(
            settings, sources={name: mock_source for name in SOURCES}, sink=sink
        )

        await run_for(engine, 0.3)

        stats = engine.metrics.stats
        assert sink.attempts >= 2
        assert stats.ticks_failed >= 2
        assert stats.ticks_completed == 0
        assert stats.total_ticks == engine.metrics.get_counter("ticks")

    @pytest.mark.asyncio
    async def test_crashing_sink_counts_tick_once(
        self, settings: Settings, mock_source: MockQuoteSource
    ) -> None:
        """Test a tick whose sink crashes is counted as failed only."""
        engine = TrackerEngine(
            settings, sources={name: mock_source for name in SOURCES}, sink=CrashingSink()
        )

        with pytest.raises(RuntimeError):
            await engine.tick()

        stats = engine.metrics.stats
        assert stats.ticks_completed == 0
        assert engine.metrics.get_counter("ticks") == 1
        assert engine.history.opportunity_count == 1

    @pytest.mark.asyncio
    async def test_run_twice_rejected(self, engine: TrackerEngine) -> None:
        """Test the loop cannot be started while running."""
        task = asyncio.create_task(engine.run())
        await asyncio.sleep(0)

        with pytest.raises(RuntimeError):
            await engine.run()

        engine.stop()
        await asyncio.wait_for(task, timeout=2.0)

    @pytest.mark.asyncio
    async def test_stop_before_start(self, engine: TrackerEngine) -> None:
        """Test a stop requested before the loop starts prevents ticking."""
        engine.stop()

        await asyncio.wait_for(engine.run(), timeout=1.0)

        assert engine.metrics.stats.ticks_completed == 0
