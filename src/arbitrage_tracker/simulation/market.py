"""
Simulated quote sources for demo mode.

Generates prices in a narrow band around a base price so spreads
regularly cross the default threshold, with optional latency and
failures to exercise the retry path.
"""

import asyncio
import random

from arbitrage_tracker.config.constants import DEFAULT_SIM_BASE_PRICE, DEFAULT_SIM_PRICE_RANGE
from arbitrage_tracker.config.settings import Settings
from arbitrage_tracker.core.exceptions import SourceError
from arbitrage_tracker.core.types import Quote, QuoteSource


class SimulatedQuoteSource:
    """
    Quote source backed by a random number generator.

    Features:
    - Uniform prices in [base_price, base_price + price_range)
    - Random response delay up to ``latency_ms``
    - Random failures with probability ``failure_rate``
    - Seedable for reproducible runs
    """

    def __init__(
        self,
        base_price: float = DEFAULT_SIM_BASE_PRICE,
        price_range: float = DEFAULT_SIM_PRICE_RANGE,
        latency_ms: int = 0,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize simulator.

        Args:
            base_price: Lowest price quoted.
            price_range: Width of the price band.
            latency_ms: Maximum simulated response delay.
            failure_rate: Probability of a failed request.
            rng: Random generator (default: unseeded).
        """
        if base_price <= 0:
            raise ValueError(f"Base price must be positive: {base_price}")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"Failure rate must be in [0, 1]: {failure_rate}")

        self._base_price = base_price
        self._price_range = price_range
        self._latency_ms = latency_ms
        self._failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._request_count = 0

    async def get_price(self, source: str) -> Quote:
        """Quote a simulated price for ``source``."""
        self._request_count += 1

        if self._latency_ms > 0:
            await asyncio.sleep(self._rng.uniform(0, self._latency_ms) / 1000)

        if self._failure_rate > 0 and self._rng.random() < self._failure_rate:
            raise SourceError(source, "simulated outage")

        price = self._base_price + self._rng.random() * self._price_range
        return Quote(source=source, price=price)

    @property
    def request_count(self) -> int:
        """Get number of quote requests served."""
        return self._request_count


def build_sources(settings: Settings) -> dict[str, QuoteSource]:
    """
    Map every configured source name to a simulated source.

    Args:
        settings: Application settings.

    Returns:
        Ordered mapping of source name to quote source.
    """
    rng = random.Random(settings.sim_seed)
    simulator = SimulatedQuoteSource(
        base_price=settings.sim_base_price,
        price_range=settings.sim_price_range,
        latency_ms=settings.sim_latency_ms,
        failure_rate=settings.sim_failure_rate,
        rng=rng,
    )
    return {name: simulator for name in settings.sources}
