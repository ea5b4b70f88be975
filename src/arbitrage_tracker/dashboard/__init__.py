"""Dashboard module for web-based monitoring."""

from arbitrage_tracker.dashboard.server import create_app, render_dashboard


__all__ = [
    "create_app",
    "render_dashboard",
]
