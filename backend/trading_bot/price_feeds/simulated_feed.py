"""
Simulated Price Feed

Random-walk ticks for paper trading. Same lifecycle contract as the live
feed: one worker task per symbol, shutdown observed between ticks.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from trading_bot.precision import round_half_up
from trading_bot.price_feeds.base import MarketDataFeed, PriceTick
from trading_bot.price_feeds.cache import PriceFeedCache

logger = logging.getLogger(__name__)

DEFAULT_START_PRICE = Decimal("100")
MAX_STEP_PCT = 0.001  # +/-0.1% per tick


class SimulatedPriceFeed(MarketDataFeed):
    """Publishes a bounded random walk per symbol every interval_seconds."""

    def __init__(
        self,
        cache: PriceFeedCache,
        symbols: List[str],
        start_prices: Optional[Dict[str, Decimal]] = None,
        interval_seconds: float = 1.0,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(name="simulated")
        self.cache = cache
        self.symbols = [s.upper() for s in symbols]
        self.start_prices = {k.upper(): Decimal(str(v)) for k, v in (start_prices or {}).items()}
        self.interval_seconds = interval_seconds
        self._rng = rng or random.Random()

        self._prices: Dict[str, Decimal] = {}
        self._stop_event = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def start(self):
        if self.running:
            logger.warning("Simulated feed already running")
            return

        self._stop_event.clear()
        for symbol in self.symbols:
            self._tasks.append(asyncio.create_task(self._run_symbol(symbol), name=f"sim-{symbol}"))
        logger.info(f"Starting SIMULATED market data feed for {self.symbols}")

    async def stop(self):
        self._stop_event.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("Simulated market data feed stopped")

    def next_tick(self, symbol: str) -> PriceTick:
        """Advance the walk one step for a symbol and return the tick."""
        previous = self._prices.get(symbol, self.start_prices.get(symbol, DEFAULT_START_PRICE))
        step = Decimal(str(self._rng.uniform(-MAX_STEP_PCT, MAX_STEP_PCT)))
        price = round_half_up(previous * (1 + step))
        self._prices[symbol] = price
        return PriceTick(
            symbol=symbol,
            price=price,
            event_time=datetime.now(timezone.utc),
            volume=round_half_up(Decimal(str(self._rng.uniform(0.001, 1)))),
            price_change=price - previous,
        )

    async def _run_symbol(self, symbol: str):
        while not self._stop_event.is_set():
            self.cache.publish(self.next_tick(symbol))
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
