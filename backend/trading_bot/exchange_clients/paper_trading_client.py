"""
Paper Trading Exchange Client

Simulates order execution without hitting a real exchange.
Uses the live price cache for fills but keeps virtual balances in memory.

- MARKET orders fill immediately at the latest cached price
- LIMIT orders rest as NEW with their funds locked until cancelled
"""

import asyncio
import itertools
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from trading_bot.exceptions import ExchangeRejectedError
from trading_bot.exchange_clients.base import (
    AssetBalance,
    ExchangeGateway,
    OrderResult,
    OrderSide,
    OrderType,
    PortfolioGateway,
)
from trading_bot.price_feeds.cache import PriceFeedCache

logger = logging.getLogger(__name__)

# Binance-compatible error codes so logs read the same in both modes
INSUFFICIENT_BALANCE_CODE = -2010
UNKNOWN_ORDER_CODE = -2013

DEFAULT_QUOTE_ASSETS = ("USDT", "USDC", "FDUSD", "EUR", "BTC", "ETH", "BNB")


def split_symbol(symbol: str, quote_assets: Sequence[str] = DEFAULT_QUOTE_ASSETS) -> Tuple[str, str]:
    """Split an exchange symbol into (base, quote).

    Examples:
        BTCEUR  -> ("BTC", "EUR")
        ETHUSDT -> ("ETH", "USDT")
    """
    symbol = symbol.upper()
    # Try longest suffix first so USDT wins over a hypothetical "DT"
    for quote in sorted(quote_assets, key=len, reverse=True):
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return symbol[: -len(quote)], quote
    raise ExchangeRejectedError(f"Unknown quote asset for symbol {symbol}")


class PaperTradingClient(ExchangeGateway, PortfolioGateway):
    """
    Simulated exchange for paper trading.

    Balance mutations are serialized under one asyncio.Lock so concurrent
    manual orders and bot orders never read a stale snapshot.
    """

    def __init__(
        self,
        price_cache: PriceFeedCache,
        starting_balances: Optional[Dict[str, Decimal]] = None,
        quote_assets: Sequence[str] = DEFAULT_QUOTE_ASSETS,
    ):
        self.price_cache = price_cache
        self.quote_assets = tuple(q.upper() for q in quote_assets)
        self._free: Dict[str, Decimal] = {
            k.upper(): Decimal(str(v)) for k, v in (starting_balances or {}).items()
        }
        self._locked: Dict[str, Decimal] = {}
        self._orders: Dict[str, OrderResult] = {}
        self._order_ids = itertools.count(1)
        self._lock = asyncio.Lock()

        logger.info(f"Initialized paper trading client with balances {self._free}")

    # ----------------------------------------------------------
    # Orders
    # ----------------------------------------------------------

    async def place_order(
        self,
        symbol: str,
        side: OrderSide,
        order_type: OrderType,
        quantity: Decimal,
        price: Optional[Decimal] = None,
    ) -> OrderResult:
        symbol = symbol.upper()
        if quantity <= 0:
            raise ExchangeRejectedError("Quantity must be positive", code=-1013)

        base, quote = split_symbol(symbol, self.quote_assets)

        async with self._lock:
            if order_type == OrderType.MARKET:
                tick = self.price_cache.latest(symbol)
                if tick is None:
                    raise ExchangeRejectedError(f"No market price available for {symbol}")
                fill_price = tick.price
                self._settle_market(side, base, quote, quantity, fill_price)
                status, executed = "FILLED", quantity
            else:
                if price is None or price <= 0:
                    raise ExchangeRejectedError("LIMIT orders require a positive price", code=-1013)
                fill_price = price
                self._lock_funds(side, base, quote, quantity, price)
                status, executed = "NEW", Decimal("0")

            order = OrderResult(
                exchange_order_id=f"paper-{next(self._order_ids)}",
                symbol=symbol,
                side=side,
                order_type=order_type,
                status=status,
                quantity=quantity,
                executed_quantity=executed,
                price=fill_price,
            )
            self._orders[order.exchange_order_id] = order

        logger.info(
            f"[PAPER] {symbol} {side.value} {order_type.value} qty={quantity} "
            f"price={fill_price} status={status} orderId={order.exchange_order_id}"
        )
        return order

    async def cancel_order(self, symbol: str, order_id: str) -> OrderResult:
        async with self._lock:
            order = self._find(symbol, order_id)
            if order.status != "NEW":
                raise ExchangeRejectedError(f"Order {order_id} is {order.status}, cannot cancel", code=-2011)

            base, quote = split_symbol(order.symbol, self.quote_assets)
            self._release_funds(order.side, base, quote, order.quantity, order.price)
            cancelled = OrderResult(
                exchange_order_id=order.exchange_order_id,
                symbol=order.symbol,
                side=order.side,
                order_type=order.order_type,
                status="CANCELED",
                quantity=order.quantity,
                executed_quantity=order.executed_quantity,
                price=order.price,
            )
            self._orders[order_id] = cancelled

        logger.info(f"[PAPER] Cancelled order {order_id} on {symbol}")
        return cancelled

    async def get_order(self, symbol: str, order_id: str) -> OrderResult:
        return self._find(symbol, order_id)

    def _find(self, symbol: str, order_id: str) -> OrderResult:
        order = self._orders.get(order_id)
        if order is None or order.symbol != symbol.upper():
            raise ExchangeRejectedError("Order does not exist.", code=UNKNOWN_ORDER_CODE)
        return order

    # ----------------------------------------------------------
    # Balance bookkeeping (call with self._lock held)
    # ----------------------------------------------------------

    def _debit(self, asset: str, amount: Decimal):
        available = self._free.get(asset, Decimal("0"))
        if available < amount:
            raise ExchangeRejectedError(
                "Account has insufficient balance for requested action.",
                code=INSUFFICIENT_BALANCE_CODE,
            )
        self._free[asset] = available - amount

    def _credit(self, asset: str, amount: Decimal):
        self._free[asset] = self._free.get(asset, Decimal("0")) + amount

    def _settle_market(self, side: OrderSide, base: str, quote: str, quantity: Decimal, price: Decimal):
        notional = quantity * price
        if side == OrderSide.BUY:
            self._debit(quote, notional)
            self._credit(base, quantity)
        else:
            self._debit(base, quantity)
            self._credit(quote, notional)

    def _lock_funds(self, side: OrderSide, base: str, quote: str, quantity: Decimal, price: Decimal):
        asset, amount = (quote, quantity * price) if side == OrderSide.BUY else (base, quantity)
        self._debit(asset, amount)
        self._locked[asset] = self._locked.get(asset, Decimal("0")) + amount

    def _release_funds(self, side: OrderSide, base: str, quote: str, quantity: Decimal, price: Decimal):
        asset, amount = (quote, quantity * price) if side == OrderSide.BUY else (base, quantity)
        self._locked[asset] = self._locked.get(asset, Decimal("0")) - amount
        self._credit(asset, amount)

    # ----------------------------------------------------------
    # Account / Balance
    # ----------------------------------------------------------

    async def get_balances(self) -> List[AssetBalance]:
        assets = sorted(set(self._free) | set(self._locked))
        balances = []
        for asset in assets:
            free = self._free.get(asset, Decimal("0"))
            locked = self._locked.get(asset, Decimal("0"))
            if free > 0 or locked > 0:
                balances.append(AssetBalance(asset=asset, free=free, locked=locked))
        return balances
