"""
Price Feeds Module

Provides the market data side of the bot: push-based feeds writing into a
last-value cache that the trading bot samples on every tick.

Components:
- PriceTick: Immutable latest value for a symbol
- PriceFeedCache: Last-write-wins store per symbol
- MarketDataFeed: Abstract base class for feeds
- BinanceStreamFeed: Binance Spot WebSocket streams (live mode)
- SimulatedPriceFeed: Random-walk ticks (paper mode)
"""

from trading_bot.price_feeds.base import MarketDataFeed, PriceTick
from trading_bot.price_feeds.cache import PriceFeedCache
from trading_bot.price_feeds.binance_feed import BinanceStreamFeed
from trading_bot.price_feeds.simulated_feed import SimulatedPriceFeed

__all__ = [
    "MarketDataFeed",
    "PriceTick",
    "PriceFeedCache",
    "BinanceStreamFeed",
    "SimulatedPriceFeed",
]
