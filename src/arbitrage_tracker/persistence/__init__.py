"""Persistence module for durable opportunity records."""

from arbitrage_tracker.persistence.trade_log import TradeLogSink, format_record


__all__ = [
    "TradeLogSink",
    "format_record",
]
