"""Configuration module for the arbitrage tracker."""

from arbitrage_tracker.config.constants import (
    DEFAULT_FANOUT_RETRIES,
    DEFAULT_FANOUT_TIMEOUT_MS,
    DEFAULT_SOURCES,
    DEFAULT_SPREAD_THRESHOLD_PCT,
)
from arbitrage_tracker.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_FANOUT_RETRIES",
    "DEFAULT_FANOUT_TIMEOUT_MS",
    "DEFAULT_SOURCES",
    "DEFAULT_SPREAD_THRESHOLD_PCT",
]
