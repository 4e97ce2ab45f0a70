"""
Base Market Data Feed Interface

Defines the tick value pushed by every feed and the lifecycle contract
(start/stop) that live and simulated feeds implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class PriceTick:
    """Latest market value for a symbol. Superseded by later ticks (last write wins)."""
    symbol: str
    price: Decimal
    event_time: datetime
    volume: Optional[Decimal] = None
    price_change: Optional[Decimal] = None  # close - open over the stream's window


class MarketDataFeed(ABC):
    """
    Abstract base class for push-based market data feeds.

    A feed runs one worker task per subscribed symbol and writes every
    received tick into a PriceFeedCache. Workers must observe the shutdown
    signal between reads so stop() returns promptly.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def start(self):
        """Spawn the per-symbol worker tasks."""
        pass

    @abstractmethod
    async def stop(self):
        """Signal shutdown and wait for every worker to finish."""
        pass

    @property
    @abstractmethod
    def running(self) -> bool:
        """True while worker tasks are active."""
        pass
