"""
Shared test fixtures for trading bot backend tests.

Provides reusable fixtures for:
- Price cache and tick factories
- Engine configuration snapshots
- Mock exchange / portfolio gateways
- A controllable clock for cooldown tests
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from trading_bot.exchange_clients.base import AssetBalance, OrderResult, OrderSide, OrderType
from trading_bot.price_feeds.base import PriceTick
from trading_bot.price_feeds.cache import PriceFeedCache
from trading_bot.strategies import StrategyType
from trading_bot.trading_engine.bot_state import EngineConfig


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------


def _make_tick(symbol="BTCEUR", price="100", **overrides):
    return PriceTick(
        symbol=symbol,
        price=Decimal(str(price)),
        event_time=overrides.get("event_time", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        volume=overrides.get("volume"),
        price_change=overrides.get("price_change"),
    )


@pytest.fixture
def price_cache():
    return PriceFeedCache()


@pytest.fixture
def make_tick():
    """Factory for PriceTick values."""
    return _make_tick


# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------


def _make_config(**overrides) -> EngineConfig:
    values = {
        "strategy": StrategyType.SMA,
        "sma_short_period": 2,
        "sma_long_period": 3,
        "vortex_period": 3,
        "sampling_interval_seconds": 60,
        "order_size_fraction": Decimal("0.5"),
        "cooldown_seconds": 0,
        "min_order_notional": Decimal("10"),
        "quote_asset": "EUR",
        "symbols": ("BTCEUR",),
    }
    values.update(overrides)
    return EngineConfig(**values)


@pytest.fixture
def engine_config():
    return _make_config()


@pytest.fixture
def make_config():
    """Factory for EngineConfig snapshots with small test periods."""
    return _make_config


# ---------------------------------------------------------------------------
# Gateways
# ---------------------------------------------------------------------------


def _make_order_result(side=OrderSide.BUY, executed="1.5", symbol="BTCEUR", **overrides):
    return OrderResult(
        exchange_order_id=overrides.get("exchange_order_id", "12345"),
        symbol=symbol,
        side=side,
        order_type=OrderType.MARKET,
        status=overrides.get("status", "FILLED"),
        quantity=Decimal(str(overrides.get("quantity", executed or "1.5"))),
        executed_quantity=Decimal(str(executed)) if executed is not None else None,
        price=overrides.get("price"),
    )


@pytest.fixture
def make_order_result():
    return _make_order_result


@pytest.fixture
def mock_exchange():
    """Exchange gateway double; place_order fills a BUY of 1.5 by default."""
    exchange = AsyncMock()
    exchange.place_order = AsyncMock(return_value=_make_order_result())
    return exchange


@pytest.fixture
def mock_portfolio():
    """Portfolio gateway double holding 1000 EUR and 10 BTC free."""
    balances = {
        "EUR": AssetBalance(asset="EUR", free=Decimal("1000")),
        "BTC": AssetBalance(asset="BTC", free=Decimal("10")),
    }
    portfolio = AsyncMock()
    portfolio.get_balance = AsyncMock(
        side_effect=lambda asset: balances.get(asset.upper(), AssetBalance(asset=asset.upper(), free=Decimal("0")))
    )
    return portfolio


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock advanced explicitly by tests."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()
