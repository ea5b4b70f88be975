"""
Session reporting.

Produces a one-line status for logs and the status endpoint, and the
summary printed when the tracker shuts down.
"""

import sys
from datetime import timedelta
from typing import TextIO

from arbitrage_tracker.telemetry.metrics import MetricsCollector
from arbitrage_tracker.utils.time import format_duration_us


class SessionReporter:
    """Text reports built from the metrics collector."""

    def __init__(
        self,
        metrics: MetricsCollector,
        symbol: str = "",
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize reporter.

        Args:
            metrics: Metrics collector instance.
            symbol: Instrument name shown in the summary header.
            output: Output stream (default: stdout).
        """
        self._metrics = metrics
        self._symbol = symbol
        self._output = output or sys.stdout

    @staticmethod
    def _format_uptime(seconds: float) -> str:
        """Format uptime as HH:MM:SS."""
        td = timedelta(seconds=int(seconds))
        hours, remainder = divmod(int(td.total_seconds()), 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def get_status_line(self) -> str:
        """Get a single-line status update."""
        stats = self._metrics.stats
        fanout = self._metrics.get_latency_stats("fanout")
        last = f"{stats.last_spread_pct:.3f}%" if stats.last_spread_pct is not None else "---"
        latency = format_duration_us(fanout.avg_us) if fanout.count > 0 else "---"

        return (
            f"Ticks: {stats.ticks_completed}/{stats.ticks_failed} | "
            f"Opp: {stats.opportunities_found} | "
            f"Spread: {last} | "
            f"Fan-out: {latency}"
        )

    def render_summary(self) -> str:
        """Render the end-of-session summary."""
        stats = self._metrics.stats
        fanout = self._metrics.get_latency_stats("fanout")
        uptime = self._format_uptime(self._metrics.uptime_seconds)

        lines = [
            "=" * 50,
            f"  SESSION SUMMARY {self._symbol}".rstrip(),
            "=" * 50,
            f"  Uptime: {uptime}",
            "",
            "  TICKS:",
            f"    Completed:    {stats.ticks_completed:,}",
            f"    Abandoned:    {stats.ticks_failed:,}",
            f"    Success rate: {stats.tick_success_rate:.1%}",
            f"    Retries:      {self._metrics.get_counter('fanout_retries'):,}",
            "",
            "  OPPORTUNITIES:",
            f"    Found:        {stats.opportunities_found:,}",
            f"    Best spread:  {stats.best_spread_pct:.3f}%",
            f"    Persisted:    {stats.records_persisted:,}",
            f"    Write errors: {stats.persistence_failures:,}",
        ]

        if fanout.count > 0:
            lines += [
                "",
                "  FAN-OUT LATENCY:",
                f"    avg {format_duration_us(fanout.avg_us)}"
                f"  p99 {format_duration_us(fanout.p99_us)}"
                f"  max {format_duration_us(fanout.max_us)}",
            ]

        lines.append("=" * 50)
        return "\n".join(lines)

    def print_summary(self) -> None:
        """Print the end-of-session summary."""
        self._output.write("\n" + self.render_summary() + "\n")
        self._output.flush()
