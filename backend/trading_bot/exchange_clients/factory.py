"""
Exchange Client Factory

Factory functions for creating the gateway and market data feed that match
the configured trading mode:
- paper: PaperTradingClient + SimulatedPriceFeed
- live:  BinanceClient + BinanceStreamFeed
"""

import logging
from typing import Union

from trading_bot.config import Settings
from trading_bot.exchange_clients.binance_client import BinanceClient
from trading_bot.exchange_clients.paper_trading_client import DEFAULT_QUOTE_ASSETS, PaperTradingClient
from trading_bot.price_feeds.base import MarketDataFeed
from trading_bot.price_feeds.binance_feed import BinanceStreamFeed
from trading_bot.price_feeds.cache import PriceFeedCache
from trading_bot.price_feeds.simulated_feed import SimulatedPriceFeed

logger = logging.getLogger(__name__)


def create_exchange_client(
    settings: Settings, price_cache: PriceFeedCache
) -> Union[BinanceClient, PaperTradingClient]:
    """
    Create the exchange client for settings.trading_mode.

    Args:
        settings: Application settings
        price_cache: Shared price cache (paper fills use it as the market price)

    Returns:
        Client implementing both ExchangeGateway and PortfolioGateway

    Raises:
        ValueError: If live mode is selected without API credentials
    """
    if settings.trading_mode == "live":
        if not settings.binance_api_key or not settings.binance_api_secret:
            raise ValueError("binance_api_key and binance_api_secret are required for live trading")
        logger.info("Using Binance exchange client (LIVE trading)")
        return BinanceClient(
            api_key=settings.binance_api_key,
            api_secret=settings.binance_api_secret,
            base_url=settings.rest_base_url,
            recv_window_ms=settings.binance_recv_window_ms,
        )

    logger.info("Using paper trading client (simulated fills)")
    quote_assets = list(dict.fromkeys([settings.bot_quote_asset, *DEFAULT_QUOTE_ASSETS]))
    return PaperTradingClient(
        price_cache=price_cache,
        starting_balances=settings.paper_starting_balances,
        quote_assets=quote_assets,
    )


def create_market_data_feed(settings: Settings, price_cache: PriceFeedCache) -> MarketDataFeed:
    """Create the market data feed for settings.trading_mode."""
    if settings.trading_mode == "live":
        return BinanceStreamFeed(
            cache=price_cache,
            symbols=settings.bot_symbols,
            stream_url=settings.stream_base_url,
        )
    return SimulatedPriceFeed(
        cache=price_cache,
        symbols=settings.bot_symbols,
        start_prices=settings.paper_start_prices,
        interval_seconds=settings.paper_feed_interval_seconds,
    )
