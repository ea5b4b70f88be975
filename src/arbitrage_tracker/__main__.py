"""
Entry point for the arbitrage tracker.

Usage:
    python -m arbitrage_tracker
    arbitrage-tracker  # if installed via pip
"""

import socket
import sys

from pydantic import ValidationError


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    import uvicorn

    from arbitrage_tracker import __version__
    from arbitrage_tracker.config.settings import get_settings
    from arbitrage_tracker.core.engine import TrackerEngine
    from arbitrage_tracker.dashboard.server import create_app
    from arbitrage_tracker.telemetry.logger import setup_logging

    # Print banner
    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     ARBITRAGE TRACKER v{__version__:<33}      ║
║                                                               ║
║     Cross-venue spread monitor                                ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    # Load settings
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}")
        print("\nSettings are read from TRACKER_* environment variables or a .env file, e.g.:")
        print('  TRACKER_SOURCES=["NYSE", "NASDAQ", "IEX", "ARCA"]')
        print("  TRACKER_SPREAD_THRESHOLD_PCT=0.05")
        return 1

    # Print configuration summary
    print("Configuration:")
    print(f"  Symbol:         {settings.symbol}")
    print(f"  Sources:        {', '.join(settings.sources)}")
    print(f"  Tick interval:  {settings.tick_interval_seconds:g}s")
    print(f"  Fan-out:        {settings.fanout_timeout_ms}ms x {settings.total_attempts} attempts")
    print(f"  Threshold:      {settings.spread_threshold_pct}%")
    print(f"  History:        {settings.history_size} samples / {settings.opportunity_log_size} opportunities")
    print(f"  Trade log:      {settings.trade_log_path}")
    print(f"  Dashboard:      {settings.dashboard_url}")
    print(f"  uvloop:         {'Enabled' if settings.use_uvloop else 'Disabled'}")
    print()

    async_logger = setup_logging(level=settings.log_level, log_file=settings.log_file)

    try:
        engine = TrackerEngine(settings)
        app = create_app(engine)

        # Bind up front so a busy port is reported before anything starts
        try:
            sock = socket.create_server((settings.dashboard_host, settings.dashboard_port))
        except OSError as e:
            print(f"Cannot listen on {settings.dashboard_host}:{settings.dashboard_port}: {e}")
            return 1

        config = uvicorn.Config(
            app,
            loop="uvloop" if settings.use_uvloop else "asyncio",
            log_config=None,
            log_level="warning",
        )
        server = uvicorn.Server(config)

        try:
            server.run(sockets=[sock])
        except KeyboardInterrupt:
            print("\nInterrupted by user")
        finally:
            sock.close()

        return 0

    finally:
        async_logger.stop()


if __name__ == "__main__":
    sys.exit(main())
