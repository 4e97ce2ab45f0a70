"""Centralized Pydantic schemas for API requests/responses"""

from .bot import BotConfigRequest, BotStatusResponse, SymbolBotStatus
from .market import AssetBalanceResponse, OrderResponse, PlaceOrderRequest, PriceTickResponse

__all__ = [
    # Bot schemas
    "BotConfigRequest",
    "BotStatusResponse",
    "SymbolBotStatus",
    # Market schemas
    "PriceTickResponse",
    "AssetBalanceResponse",
    "PlaceOrderRequest",
    "OrderResponse",
]
