"""
Price Feed Cache

Last-value store per symbol. Feed workers publish, the trading bot and the
control surface read. Publishing is a single dict assignment: it never
blocks, never fails and never waits on the evaluation loop.
"""

import logging
from typing import Dict, Optional

from trading_bot.price_feeds.base import PriceTick

logger = logging.getLogger(__name__)


class PriceFeedCache:
    """Concurrent last-write-wins cache of the latest tick per symbol."""

    def __init__(self):
        self._latest: Dict[str, PriceTick] = {}

    def publish(self, tick: PriceTick):
        """Overwrite the latest tick for tick.symbol."""
        self._latest[tick.symbol.upper()] = tick

    def latest(self, symbol: str) -> Optional[PriceTick]:
        """Latest tick for a symbol, or None if nothing has arrived yet."""
        return self._latest.get(symbol.upper())

    def all_latest(self) -> Dict[str, PriceTick]:
        """Point-in-time copy of every cached tick."""
        return dict(self._latest)

    def clear(self):
        self._latest.clear()
