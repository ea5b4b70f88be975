"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arbitrage_tracker.config.constants import (
    DEFAULT_DASHBOARD_HOST,
    DEFAULT_DASHBOARD_PORT,
    DEFAULT_FANOUT_RETRIES,
    DEFAULT_FANOUT_TIMEOUT_MS,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_OPPORTUNITY_LOG_SIZE,
    DEFAULT_SIM_BASE_PRICE,
    DEFAULT_SIM_PRICE_RANGE,
    DEFAULT_SOURCES,
    DEFAULT_SPREAD_THRESHOLD_PCT,
    DEFAULT_SYMBOL,
    DEFAULT_TICK_INTERVAL_SECONDS,
    DEFAULT_TRADE_LOG_PATH,
    MIN_SOURCES,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field can be overridden with a ``TRACKER_``-prefixed variable,
    e.g. ``TRACKER_SPREAD_THRESHOLD_PCT=0.1`` or
    ``TRACKER_SOURCES='["NYSE", "IEX"]'``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Instrument & Sources
    # =========================================================================

    symbol: str = Field(
        default=DEFAULT_SYMBOL,
        min_length=1,
        description="Display name of the tracked instrument",
    )

    sources: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCES),
        description="Ordered source identifiers sampled on every tick",
    )

    # =========================================================================
    # Scheduling
    # =========================================================================

    tick_interval_seconds: float = Field(
        default=DEFAULT_TICK_INTERVAL_SECONDS,
        ge=0.05,
        le=60.0,
        description="Minimum time between the starts of two ticks",
    )

    fanout_timeout_ms: int = Field(
        default=DEFAULT_FANOUT_TIMEOUT_MS,
        ge=10,
        le=60000,
        description="Overall deadline for one fan-out attempt in milliseconds",
    )

    fanout_retries: int = Field(
        default=DEFAULT_FANOUT_RETRIES,
        ge=0,
        le=10,
        description="Extra fan-out attempts after a failure or timeout",
    )

    # =========================================================================
    # Detection & History
    # =========================================================================

    spread_threshold_pct: float = Field(
        default=DEFAULT_SPREAD_THRESHOLD_PCT,
        ge=0.0,
        description="Spread in percent above which a tick is an opportunity",
    )

    history_size: int = Field(
        default=DEFAULT_HISTORY_SIZE,
        ge=1,
        le=1000,
        description="Number of price samples kept for charting",
    )

    opportunity_log_size: int = Field(
        default=DEFAULT_OPPORTUNITY_LOG_SIZE,
        ge=1,
        le=1000,
        description="Number of recent opportunities kept for display",
    )

    # =========================================================================
    # Persistence
    # =========================================================================

    trade_log_path: Path = Field(
        default=Path(DEFAULT_TRADE_LOG_PATH),
        description="Append-only file receiving one line per opportunity",
    )

    # =========================================================================
    # Dashboard
    # =========================================================================

    dashboard_host: str = Field(
        default=DEFAULT_DASHBOARD_HOST,
        description="Interface the dashboard listens on",
    )

    dashboard_port: int = Field(
        default=DEFAULT_DASHBOARD_PORT,
        ge=1,
        le=65535,
        description="Port the dashboard listens on",
    )

    open_browser: bool = Field(
        default=True,
        description="Open the dashboard in a browser once the server starts",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional file receiving a copy of all log output",
    )

    use_uvloop: bool = Field(
        default=True,
        description="Serve on the uvloop event loop",
    )

    # =========================================================================
    # Simulation
    # =========================================================================

    sim_base_price: float = Field(
        default=DEFAULT_SIM_BASE_PRICE,
        gt=0.0,
        description="Lowest price a simulated source can quote",
    )

    sim_price_range: float = Field(
        default=DEFAULT_SIM_PRICE_RANGE,
        ge=0.0,
        description="Width of the uniform band above the base price",
    )

    sim_latency_ms: int = Field(
        default=0,
        ge=0,
        le=60000,
        description="Maximum simulated response time per quote",
    )

    sim_failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Probability that a simulated quote request fails",
    )

    sim_seed: int | None = Field(
        default=None,
        description="Seed for reproducible simulated prices",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("sources", mode="after")
    @classmethod
    def validate_sources(cls, v: list[str]) -> list[str]:
        """Require at least two distinct, non-empty source names."""
        names = [name.strip() for name in v]
        if any(not name for name in names):
            raise ValueError("Source names cannot be empty")
        if len(names) < MIN_SOURCES:
            raise ValueError(f"At least {MIN_SOURCES} sources are required, got {len(names)}")
        if len(set(names)) != len(names):
            raise ValueError(f"Source names must be unique: {names}")
        return names

    @field_validator("spread_threshold_pct", mode="after")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Warn if the threshold would flag almost every tick."""
        if v < 0.001:
            import warnings

            warnings.warn(
                f"Spread threshold {v}% is very low, nearly every tick will be flagged",
                stacklevel=2,
            )
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def fanout_timeout_seconds(self) -> float:
        """Fan-out deadline in seconds."""
        return self.fanout_timeout_ms / 1000

    @property
    def total_attempts(self) -> int:
        """Fan-out attempts per tick, first try included."""
        return 1 + self.fanout_retries

    @property
    def dashboard_url(self) -> str:
        """URL the dashboard is reachable at."""
        host = "localhost" if self.dashboard_host in ("0.0.0.0", "127.0.0.1") else self.dashboard_host
        return f"http://{host}:{self.dashboard_port}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
