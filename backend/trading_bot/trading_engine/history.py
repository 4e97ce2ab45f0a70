"""
Rolling price history per symbol.

Only the bot's tick path appends; readers get list copies so an eviction
during a status query can never be observed half-way.
"""

from collections import deque
from decimal import Decimal
from typing import Deque, Dict, List

from trading_bot.constants import MAX_HISTORY_SIZE


class HistoryBuffer:
    def __init__(self, max_size: int = MAX_HISTORY_SIZE):
        self.max_size = max_size
        self._samples: Dict[str, Deque[Decimal]] = {}

    def append(self, symbol: str, price: Decimal):
        """Push one sample, evicting the oldest beyond max_size."""
        samples = self._samples.get(symbol)
        if samples is None:
            samples = deque(maxlen=self.max_size)
            self._samples[symbol] = samples
        samples.append(price)

    def snapshot(self, symbol: str) -> List[Decimal]:
        """Point-in-time copy of a symbol's samples, oldest first."""
        return list(self._samples.get(symbol, ()))

    def size(self, symbol: str) -> int:
        return len(self._samples.get(symbol, ()))

    def symbols(self) -> List[str]:
        return list(self._samples.keys())
