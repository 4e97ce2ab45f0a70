"""
Tests for backend/trading_bot/exchange_clients/factory.py
"""

import pytest

from trading_bot.config import Settings
from trading_bot.exchange_clients.binance_client import BinanceClient
from trading_bot.exchange_clients.factory import create_exchange_client, create_market_data_feed
from trading_bot.exchange_clients.paper_trading_client import PaperTradingClient
from trading_bot.price_feeds.binance_feed import BinanceStreamFeed
from trading_bot.price_feeds.simulated_feed import SimulatedPriceFeed


def _make_settings(**overrides):
    return Settings(_env_file=None, **overrides)


class TestCreateExchangeClient:
    def test_paper_mode(self, price_cache):
        client = create_exchange_client(_make_settings(trading_mode="paper"), price_cache)
        assert isinstance(client, PaperTradingClient)
        assert client.quote_assets[0] == "EUR"

    @pytest.mark.asyncio
    async def test_live_mode(self, price_cache):
        settings = _make_settings(trading_mode="live", binance_api_key="k", binance_api_secret="s")
        client = create_exchange_client(settings, price_cache)
        assert isinstance(client, BinanceClient)
        assert client.base_url == "https://api.binance.com"
        await client.close()

    @pytest.mark.asyncio
    async def test_live_mode_testnet(self, price_cache):
        settings = _make_settings(
            trading_mode="LIVE", binance_api_key="k", binance_api_secret="s", binance_use_testnet=True
        )
        client = create_exchange_client(settings, price_cache)
        assert client.base_url == "https://testnet.binance.vision"
        await client.close()

    def test_live_mode_requires_credentials(self, price_cache):
        with pytest.raises(ValueError):
            create_exchange_client(_make_settings(trading_mode="live"), price_cache)


class TestCreateMarketDataFeed:
    def test_paper_mode(self, price_cache):
        feed = create_market_data_feed(_make_settings(), price_cache)
        assert isinstance(feed, SimulatedPriceFeed)

    def test_live_mode(self, price_cache):
        feed = create_market_data_feed(_make_settings(trading_mode="live"), price_cache)
        assert isinstance(feed, BinanceStreamFeed)
        assert feed.symbols == ["BTCEUR", "ETHEUR"]
