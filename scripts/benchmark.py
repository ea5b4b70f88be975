#!/usr/bin/env python3
"""
Latency Benchmark Script.

Measures internal latencies for the tick pipeline stages.
"""

import asyncio
import random
import statistics
import sys
from pathlib import Path

# Add src to path for direct execution
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from arbitrage_tracker.config.constants import DEFAULT_SOURCES
from arbitrage_tracker.core.types import OpportunityEvent, Quote, Sample
from arbitrage_tracker.market.fanout import QuoteFanout
from arbitrage_tracker.market.history import HistoryStore
from arbitrage_tracker.simulation.market import SimulatedQuoteSource
from arbitrage_tracker.strategy.detector import SpreadDetector
from arbitrage_tracker.utils.time import format_duration_us, get_timestamp_us


def summarize(latencies: list[int]) -> dict[str, float]:
    """Aggregate raw latencies."""
    return {
        "min": min(latencies),
        "max": max(latencies),
        "avg": statistics.mean(latencies),
        "p50": statistics.median(latencies),
        "p99": sorted(latencies)[int(len(latencies) * 0.99)],
    }


def benchmark_spread_detection(iterations: int = 10000) -> dict[str, float]:
    """Benchmark spread evaluation for one quote set."""
    detector = SpreadDetector()
    rng = random.Random(7)
    latencies: list[int] = []

    for _ in range(iterations):
        quotes = [Quote(name, 140.0 + rng.random() * 0.4) for name in DEFAULT_SOURCES]

        start = get_timestamp_us()
        detector.evaluate(quotes)
        latencies.append(get_timestamp_us() - start)

    return summarize(latencies)


def benchmark_history_record(iterations: int = 10000) -> dict[str, float]:
    """Benchmark a history update plus a dashboard snapshot."""
    history = HistoryStore()
    sample = Sample.from_quotes(get_timestamp_us(), [Quote(n, 140.0) for n in DEFAULT_SOURCES])
    event = OpportunityEvent(get_timestamp_us(), "NYSE", "IEX", 0.1)
    latencies: list[int] = []

    for i in range(iterations):
        start = get_timestamp_us()
        history.record(sample, event if i % 3 == 0 else None)
        history.snapshot()
        latencies.append(get_timestamp_us() - start)

    return summarize(latencies)


async def benchmark_fanout(iterations: int = 1000) -> dict[str, float]:
    """Benchmark a full concurrent fan-out against the simulator."""
    simulator = SimulatedQuoteSource(rng=random.Random(7))
    fanout = QuoteFanout({name: simulator for name in DEFAULT_SOURCES})
    latencies: list[int] = []

    for _ in range(iterations):
        start = get_timestamp_us()
        await fanout.fetch()
        latencies.append(get_timestamp_us() - start)

    return summarize(latencies)


def format_stats(stats: dict[str, float]) -> str:
    """Format stats for display."""
    return (
        f"min={format_duration_us(int(stats['min']))}, "
        f"avg={format_duration_us(int(stats['avg']))}, "
        f"p50={format_duration_us(int(stats['p50']))}, "
        f"p99={format_duration_us(int(stats['p99']))}, "
        f"max={format_duration_us(int(stats['max']))}"
    )


def main() -> int:
    """Run all benchmarks."""
    print("=" * 70)
    print("  LATENCY BENCHMARK")
    print("=" * 70)
    print()

    print("Warming up...")
    benchmark_spread_detection(100)
    benchmark_history_record(100)
    asyncio.run(benchmark_fanout(100))
    print()

    print("1. Spread Detection (10,000 iterations)")
    print(f"   {format_stats(benchmark_spread_detection(10000))}")
    print()

    print("2. History Record + Snapshot (10,000 iterations)")
    print(f"   {format_stats(benchmark_history_record(10000))}")
    print()

    print("3. Simulated Fan-out (1,000 iterations)")
    print(f"   {format_stats(asyncio.run(benchmark_fanout(1000)))}")
    print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
