"""
Shared FastAPI dependencies

main.py registers the live components on startup; routers resolve them via
Depends(). Tests swap them with app.dependency_overrides.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException

from trading_bot.exchange_clients.base import ExchangeGateway, PortfolioGateway
from trading_bot.price_feeds.cache import PriceFeedCache
from trading_bot.trading_engine.trading_bot import TradingBot


@dataclass
class Components:
    price_cache: PriceFeedCache
    exchange: ExchangeGateway
    portfolio: PortfolioGateway
    bot: TradingBot


_components: Optional[Components] = None


def set_components(components: Optional[Components]):
    global _components
    _components = components


def _require() -> Components:
    if _components is None:
        raise HTTPException(status_code=503, detail="Trading bot is not initialized yet")
    return _components


def get_price_cache() -> PriceFeedCache:
    return _require().price_cache


def get_exchange() -> ExchangeGateway:
    return _require().exchange


def get_portfolio() -> PortfolioGateway:
    return _require().portfolio


def get_trading_bot() -> TradingBot:
    return _require().bot
