"""
Tracker constants and default configuration values.

This module contains all hardcoded values used throughout the tracker.
Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Instrument & Sources
# =============================================================================

DEFAULT_SYMBOL: Final[str] = "NVDA (NVIDIA Corp)"

DEFAULT_SOURCES: Final[tuple[str, ...]] = ("NYSE", "NASDAQ", "IEX", "ARCA")

# A spread needs a best and a worst quote
MIN_SOURCES: Final[int] = 2


# =============================================================================
# Scheduling
# =============================================================================

DEFAULT_TICK_INTERVAL_SECONDS: Final[float] = 1.0

# Overall deadline for one fan-out attempt (all sources together)
DEFAULT_FANOUT_TIMEOUT_MS: Final[int] = 900

# Extra attempts after the first one (3 attempts in total)
DEFAULT_FANOUT_RETRIES: Final[int] = 2


# =============================================================================
# Detection
# =============================================================================

# Spread threshold in percent (0.05 = 0.05%)
DEFAULT_SPREAD_THRESHOLD_PCT: Final[float] = 0.05


# =============================================================================
# History
# =============================================================================

DEFAULT_HISTORY_SIZE: Final[int] = 20
DEFAULT_OPPORTUNITY_LOG_SIZE: Final[int] = 10


# =============================================================================
# Persistence
# =============================================================================

DEFAULT_TRADE_LOG_PATH: Final[str] = "trades.log"

RECORD_PREFIX: Final[str] = "[PROFIT]"
SPREAD_DECIMALS: Final[int] = 3


# =============================================================================
# Dashboard
# =============================================================================

DEFAULT_DASHBOARD_HOST: Final[str] = "127.0.0.1"
DEFAULT_DASHBOARD_PORT: Final[int] = 3000

DASHBOARD_REFRESH_MS: Final[int] = 1000

# Chart line colors per source, cycled when more sources are configured
SOURCE_COLORS: Final[tuple[str, ...]] = (
    "#60a5fa",
    "#f472b6",
    "#fbbf24",
    "#a78bfa",
    "#34d399",
    "#f87171",
)


# =============================================================================
# Simulation
# =============================================================================

DEFAULT_SIM_BASE_PRICE: Final[float] = 140.0
DEFAULT_SIM_PRICE_RANGE: Final[float] = 0.4


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000

# Samples kept per latency metric
LATENCY_WINDOW_SIZE: Final[int] = 1000
