"""Simulation module for demo mode without a market-data feed."""

from arbitrage_tracker.simulation.market import SimulatedQuoteSource, build_sources


__all__ = [
    "SimulatedQuoteSource",
    "build_sources",
]
