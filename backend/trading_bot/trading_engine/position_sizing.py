"""
Position sizing for bot orders

Quantities are always floored to 8 fraction digits so an order never spends
more than the balance it was sized from. Both functions return None when
the order should not be placed (too small, or nothing to sell).
"""

import logging
from decimal import Decimal
from typing import Optional

from trading_bot.exchange_clients.base import PortfolioGateway
from trading_bot.precision import divide_floor, floor_quantity

logger = logging.getLogger(__name__)


def base_asset_for(symbol: str, quote_asset: str) -> Optional[str]:
    """
    Derive the base asset by stripping the quote suffix.

    Examples:
        BTCEUR, EUR  -> BTC
        ETHUSDT, USDT -> ETH
        BTCUSDT, EUR -> None (not quoted in EUR)
    """
    symbol = symbol.upper()
    quote_asset = quote_asset.upper()
    if len(symbol) > len(quote_asset) and symbol.endswith(quote_asset):
        return symbol[: -len(quote_asset)]
    return None


async def calculate_buy_quantity(
    portfolio: PortfolioGateway,
    symbol: str,
    quote_asset: str,
    reference_price: Decimal,
    order_size_fraction: Decimal,
    min_order_notional: Decimal,
) -> Optional[Decimal]:
    """
    Spend order_size_fraction of the free quote balance at reference_price.

    Args:
        portfolio: Balance source
        symbol: Trading pair (for logging)
        quote_asset: Asset spent on the buy
        reference_price: Last sampled price
        order_size_fraction: Fraction of the free balance to spend, in (0, 1]
        min_order_notional: Smallest spend worth placing

    Returns:
        Base quantity to buy, or None if the spend is below the minimum

    Raises:
        ExchangeError: Balance lookup failed
    """
    balance = await portfolio.get_balance(quote_asset)
    target_spend = balance.free * order_size_fraction

    if target_spend < min_order_notional:
        logger.warning(
            f"{symbol}: BUY skipped - spend {target_spend} {quote_asset} below minimum notional "
            f"{min_order_notional} (free={balance.free})"
        )
        return None

    quantity = divide_floor(target_spend, reference_price)
    if quantity <= 0:
        logger.warning(f"{symbol}: BUY skipped - quantity rounds to zero at price {reference_price}")
        return None

    return quantity


async def calculate_sell_quantity(
    portfolio: PortfolioGateway,
    symbol: str,
    quote_asset: str,
    reference_price: Decimal,
    order_size_fraction: Decimal,
    min_order_notional: Decimal,
) -> Optional[Decimal]:
    """Sell order_size_fraction of the free base balance, or None if too small."""
    base_asset = base_asset_for(symbol, quote_asset)
    if base_asset is None:
        logger.warning(f"{symbol}: SELL skipped - symbol is not quoted in {quote_asset}")
        return None

    balance = await portfolio.get_balance(base_asset)
    quantity = floor_quantity(balance.free * order_size_fraction)

    if quantity <= 0:
        logger.warning(f"{symbol}: SELL skipped - no free {base_asset} to sell")
        return None

    notional = quantity * reference_price
    if notional < min_order_notional:
        logger.warning(
            f"{symbol}: SELL skipped - notional {notional} below minimum {min_order_notional}"
        )
        return None

    return quantity
