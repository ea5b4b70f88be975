"""Telemetry module for logging, metrics, and reporting."""

from arbitrage_tracker.telemetry.logger import AsyncLogger, setup_logging
from arbitrage_tracker.telemetry.metrics import MetricsCollector
from arbitrage_tracker.telemetry.reporter import SessionReporter


__all__ = [
    "AsyncLogger",
    "MetricsCollector",
    "SessionReporter",
    "setup_logging",
]
