"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from arbitrage_tracker.config.settings import Settings
from arbitrage_tracker.core.engine import TrackerEngine
from arbitrage_tracker.core.types import Quote
from tests.mocks import FIXED_TIMESTAMP_US, SOURCES, MockQuoteSource, RecordingSink


# =============================================================================
# Price Fixtures
# =============================================================================


@pytest.fixture
def opportunity_prices() -> dict[str, float]:
    """Prices with a 2.02% spread between B and C."""
    return {"A": 100.0, "B": 101.0, "C": 99.0, "D": 100.0}


@pytest.fixture
def quiet_prices() -> dict[str, float]:
    """Prices with a 0.01% spread, below the default threshold."""
    return {"A": 100.00, "B": 100.01, "C": 100.00, "D": 100.00}


@pytest.fixture
def opportunity_quotes(opportunity_prices: dict[str, float]) -> list[Quote]:
    """Quotes in source order for the opportunity scenario."""
    return [Quote(name, price) for name, price in opportunity_prices.items()]


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Factory for isolated settings with fast test timings."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "sources": SOURCES,
            "tick_interval_seconds": 0.05,
            "fanout_timeout_ms": 50,
            "fanout_retries": 2,
            "trade_log_path": tmp_path / "trades.log",
            "open_browser": False,
            "use_uvloop": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)  # type: ignore[call-arg]

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., Settings]) -> Settings:
    """Default test settings."""
    return make_settings()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def mock_source(opportunity_prices: dict[str, float]) -> MockQuoteSource:
    """Mock source answering every configured name."""
    return MockQuoteSource(opportunity_prices)


@pytest.fixture
def recording_sink() -> RecordingSink:
    """In-memory sink."""
    return RecordingSink()


@pytest.fixture
def fixed_clock() -> Callable[[], int]:
    """Clock advancing one second per call from a fixed start."""
    state = {"now": FIXED_TIMESTAMP_US}

    def _clock() -> int:
        now = state["now"]
        state["now"] += 1_000_000
        return now

    return _clock


@pytest.fixture
def engine(
    settings: Settings,
    mock_source: MockQuoteSource,
    recording_sink: RecordingSink,
    fixed_clock: Callable[[], int],
) -> TrackerEngine:
    """Engine wired to mock sources and an in-memory sink."""
    return TrackerEngine(
        settings,
        sources={name: mock_source for name in SOURCES},
        sink=recording_sink,
        clock=fixed_clock,
    )
