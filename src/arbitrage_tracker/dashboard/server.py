"""
FastAPI server for the tracker dashboard.

Serves the HTML chart page and read-only JSON views of the engine's
history. The engine's tick loop runs inside the app lifespan.
"""

import asyncio
import html
import logging
import webbrowser
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from string import Template
from typing import Any

import orjson
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, Response

from arbitrage_tracker import __version__
from arbitrage_tracker.config.constants import DASHBOARD_REFRESH_MS, SOURCE_COLORS
from arbitrage_tracker.core.engine import TrackerEngine
from arbitrage_tracker.market.history import HistorySnapshot


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    engine: TrackerEngine = app.state.engine
    settings = engine.settings
    loop = asyncio.get_running_loop()

    task = asyncio.create_task(engine.run(), name="tracker-loop")

    if app.state.open_browser:
        loop.run_in_executor(None, webbrowser.open, settings.dashboard_url)

    try:
        yield
    finally:
        engine.stop()
        # Let an in-flight tick finish its retries before giving up on it
        grace = settings.fanout_timeout_seconds * settings.total_attempts + 1.0
        try:
            await asyncio.wait_for(task, timeout=grace)
        except TimeoutError:
            logger.warning("Tick loop did not stop in time, cancelled")
        except Exception:
            logger.exception("Tick loop ended with an error")
        finally:
            await engine.shutdown()
            engine.reporter.print_summary()


def create_app(engine: TrackerEngine, open_browser: bool | None = None) -> FastAPI:
    """
    Build the dashboard application around an engine.

    Args:
        engine: Engine whose history is displayed and whose loop the
            app lifespan drives.
        open_browser: Open the dashboard on startup (default: from settings).
    """
    app = FastAPI(title="Arbitrage Tracker", version=__version__, lifespan=lifespan)
    app.state.engine = engine
    app.state.open_browser = (
        engine.settings.open_browser if open_browser is None else open_browser
    )

    app.get("/", response_class=HTMLResponse)(get_dashboard)
    app.get("/api/history")(get_history)
    app.get("/api/opportunities")(get_opportunities)
    app.get("/api/status")(get_status)
    return app


def _json(data: Any) -> Response:
    return Response(content=orjson.dumps(data), media_type="application/json")


async def get_dashboard(request: Request) -> HTMLResponse:
    engine: TrackerEngine = request.app.state.engine
    page = render_dashboard(
        engine.history.snapshot(),
        symbol=engine.settings.symbol,
        sources=engine.source_names,
    )
    return HTMLResponse(content=page)


async def get_history(request: Request) -> Response:
    engine: TrackerEngine = request.app.state.engine
    snapshot = engine.history.snapshot()
    return _json(
        {
            "sources": engine.source_names,
            "capacity": engine.history.history_size,
            "samples": [sample.to_dict() for sample in snapshot.samples],
        }
    )


async def get_opportunities(request: Request) -> Response:
    engine: TrackerEngine = request.app.state.engine
    snapshot = engine.history.snapshot()
    return _json(
        {
            "count": snapshot.opportunity_count,
            "total": snapshot.total_opportunities,
            "capacity": engine.history.opportunity_log_size,
            "opportunities": [event.to_dict() for event in snapshot.opportunities],
        }
    )


async def get_status(request: Request) -> Response:
    engine: TrackerEngine = request.app.state.engine
    settings = engine.settings
    return _json(
        {
            "running": engine.is_running,
            "symbol": settings.symbol,
            "sources": engine.source_names,
            "tick_interval_seconds": settings.tick_interval_seconds,
            "spread_threshold_pct": settings.spread_threshold_pct,
            "status": engine.reporter.get_status_line(),
            "metrics": engine.metrics.to_dict(),
        }
    )


def _script_json(data: Any) -> str:
    """Serialize for embedding inside a <script> element."""
    return orjson.dumps(data).decode().replace("<", "\\u003c")


def render_dashboard(snapshot: HistorySnapshot, symbol: str, sources: list[str]) -> str:
    """
    Render the dashboard page for a history snapshot.

    Args:
        snapshot: History to display.
        symbol: Instrument display name.
        sources: Source names, one chart line each.
    """
    if snapshot.opportunities:
        items = "".join(
            f'<div class="profit-item">{html.escape(event.display)}</div>'
            for event in snapshot.opportunities
        )
    else:
        items = '<div class="profit-item">Scanning for spreads...</div>'

    chart_data = {
        "labels": [sample.time_label for sample in snapshot.samples],
        "datasets": [
            {
                "label": name,
                "data": [sample.prices.get(name) for sample in snapshot.samples],
                "borderColor": SOURCE_COLORS[i % len(SOURCE_COLORS)],
            }
            for i, name in enumerate(sources)
        ],
    }

    return DASHBOARD_HTML.substitute(
        symbol=html.escape(symbol),
        count=snapshot.opportunity_count,
        items=items,
        chart_data=_script_json(chart_data),
        refresh_ms=DASHBOARD_REFRESH_MS,
    )


DASHBOARD_HTML = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Tracker</title>
    <script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
    <style>
        body { background: #0b0f1a; color: #e2e8f0; font-family: 'Segoe UI', sans-serif; margin: 0; padding: 30px; }
        .nav { display: flex; justify-content: space-between; align-items: flex-start; margin-bottom: 30px; }
        .profit-container { position: relative; display: inline-block; cursor: pointer; z-index: 100; }
        .profit-badge {
            background: linear-gradient(135deg, #10b981 0%, #059669 100%);
            padding: 12px 24px; border-radius: 50px; font-weight: bold;
            box-shadow: 0 0 20px rgba(16,185,129,0.3);
        }
        .dropdown {
            display: none; position: absolute; right: 0; top: 55px;
            background: #1e293b; min-width: 380px; border-radius: 12px;
            border: 1px solid #334155; box-shadow: 0 10px 25px rgba(0,0,0,0.5); padding: 10px;
        }
        .profit-container:hover .dropdown { display: block; }
        .dropdown-header { padding: 8px; font-size: 0.7rem; color: #64748b; text-transform: uppercase; }
        .profit-item { padding: 8px; border-bottom: 1px solid #334155; font-size: 0.8rem; color: #10b981; }
        .chart-box { background: #161e2e; padding: 25px; border-radius: 16px; border: 1px solid #1f2937; }
        h1 { margin: 0; color: #60a5fa; }
    </style>
</head>
<body>
    <div class="nav">
        <div><h1>Arbitrage-Tracker</h1><p style="color:#64748b">Real-time Analysis for $symbol</p></div>
        <div class="profit-container">
            <div class="profit-badge">Total Profits Found: $count</div>
            <div class="dropdown">
                <div class="dropdown-header">Last $count</div>
                $items
            </div>
        </div>
    </div>
    <div class="chart-box"><canvas id="stockChart"></canvas></div>
    <script>
        const chartData = $chart_data;
        const ctx = document.getElementById('stockChart').getContext('2d');
        new Chart(ctx, {
            type: 'line',
            data: {
                labels: chartData.labels,
                datasets: chartData.datasets.map(function (d) {
                    return Object.assign({ borderWidth: 2, tension: 0.2, pointRadius: 4, hoverRadius: 8 }, d);
                })
            },
            options: {
                responsive: true, animation: false,
                plugins: {
                    tooltip: { enabled: true, mode: 'index', intersect: false },
                    legend: { labels: { color: '#f8fafc' } }
                },
                scales: {
                    y: { grid: { color: '#1f2937' }, ticks: { color: '#94a3b8' } },
                    x: { grid: { display: false } }
                }
            }
        });
        setTimeout(function () { location.reload(); }, $refresh_ms);
    </script>
</body>
</html>
""")
