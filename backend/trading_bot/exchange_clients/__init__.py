"""
Exchange Client Abstraction Layer

This package provides the gateways the trading bot uses to place orders and
read balances. All clients implement ExchangeGateway and PortfolioGateway.

Supported clients:
- BinanceClient: Binance Spot REST API (live mode)
- PaperTradingClient: In-memory simulated fills (paper mode)

Usage:
    from trading_bot.exchange_clients.factory import create_exchange_client

    client = create_exchange_client(settings, price_cache)
"""

from trading_bot.exchange_clients.base import (
    AssetBalance,
    ExchangeGateway,
    OrderResult,
    OrderSide,
    OrderType,
    PortfolioGateway,
)

__all__ = [
    "AssetBalance",
    "ExchangeGateway",
    "OrderResult",
    "OrderSide",
    "OrderType",
    "PortfolioGateway",
]
