"""
Exchange and Portfolio Gateway Abstract Base Classes

This module defines the interfaces the trading bot consumes for order
placement and balance lookups. Live (Binance) and paper implementations
both adhere to them so the engine never knows which one it talks to.

Design Philosophy:
- Methods return small dataclasses with Decimal amounts
- Failures raise ExchangeError subclasses carrying the provider code
- Calls are awaited inline by the caller; nothing here retries
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"


@dataclass(frozen=True)
class OrderResult:
    """Exchange view of an order after placement, lookup or cancellation"""
    exchange_order_id: str
    symbol: str
    side: OrderSide
    order_type: OrderType
    status: str  # NEW, FILLED, PARTIALLY_FILLED, CANCELED, REJECTED, EXPIRED
    quantity: Decimal
    executed_quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None


@dataclass(frozen=True)
class AssetBalance:
    """Free and locked amounts for one asset"""
    asset: str
    free: Decimal
    locked: Decimal = Decimal("0")


class ExchangeGateway(ABC):
    """Order entry side of an exchange."""

    @abstractmethod
    async def place_order(
        self,
        symbol: str,
        side: OrderSide,
        order_type: OrderType,
        quantity: Decimal,
        price: Optional[Decimal] = None,
    ) -> OrderResult:
        """
        Submit an order.

        Args:
            symbol: Exchange symbol (e.g., "BTCEUR")
            side: BUY or SELL
            order_type: MARKET or LIMIT
            quantity: Base asset quantity
            price: Limit price, required for LIMIT orders

        Returns:
            OrderResult with the exchange order id, status and executed quantity

        Raises:
            ExchangeRejectedError: Order rejected by the exchange
            ExchangeUnavailableError: Transport failure or exchange outage
        """
        pass

    @abstractmethod
    async def cancel_order(self, symbol: str, order_id: str) -> OrderResult:
        """Cancel an open order."""
        pass

    @abstractmethod
    async def get_order(self, symbol: str, order_id: str) -> OrderResult:
        """Look up an order by exchange order id."""
        pass


class PortfolioGateway(ABC):
    """Balance side of an exchange account."""

    @abstractmethod
    async def get_balances(self) -> List[AssetBalance]:
        """All assets with a non-zero free or locked amount."""
        pass

    async def get_balance(self, asset: str) -> AssetBalance:
        """
        Balance for one asset (case-insensitive).

        Returns a zero balance when the account holds none of the asset.
        """
        for balance in await self.get_balances():
            if balance.asset.upper() == asset.upper():
                return balance
        return AssetBalance(asset=asset.upper(), free=Decimal("0"), locked=Decimal("0"))
