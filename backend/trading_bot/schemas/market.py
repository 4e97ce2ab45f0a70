"""Market data, balance and order Pydantic schemas"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from trading_bot.exchange_clients.base import OrderSide, OrderType


class PriceTickResponse(BaseModel):
    symbol: str
    price: Decimal
    volume: Optional[Decimal] = None
    price_change: Optional[Decimal] = None
    event_time: datetime

    class Config:
        from_attributes = True


class AssetBalanceResponse(BaseModel):
    asset: str
    free: Decimal
    locked: Decimal

    class Config:
        from_attributes = True


class PlaceOrderRequest(BaseModel):
    symbol: str = Field(..., min_length=1)
    side: OrderSide
    order_type: OrderType = OrderType.MARKET
    quantity: Decimal = Field(..., gt=0)
    price: Optional[Decimal] = Field(None, gt=0)


class OrderResponse(BaseModel):
    exchange_order_id: str
    symbol: str
    side: OrderSide
    order_type: OrderType
    status: str
    quantity: Decimal
    executed_quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None

    class Config:
        from_attributes = True
