"""
Order Router

Manual order entry, lookup and cancellation. Orders placed here do not
touch the bot's position ledger or cooldown.
"""

import logging

from fastapi import APIRouter, Depends

from trading_bot.dependencies import get_exchange
from trading_bot.exchange_clients.base import ExchangeGateway
from trading_bot.schemas.market import OrderResponse, PlaceOrderRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderResponse)
async def place_order(request: PlaceOrderRequest, exchange: ExchangeGateway = Depends(get_exchange)):
    logger.info(
        f"Manual order: {request.symbol} {request.side.value} {request.order_type.value} "
        f"qty={request.quantity} price={request.price}"
    )
    result = await exchange.place_order(
        symbol=request.symbol.upper(),
        side=request.side,
        order_type=request.order_type,
        quantity=request.quantity,
        price=request.price,
    )
    return OrderResponse.model_validate(result)


@router.get("/{symbol}/{order_id}", response_model=OrderResponse)
async def get_order(symbol: str, order_id: str, exchange: ExchangeGateway = Depends(get_exchange)):
    result = await exchange.get_order(symbol.upper(), order_id)
    return OrderResponse.model_validate(result)


@router.delete("/{symbol}/{order_id}", response_model=OrderResponse)
async def cancel_order(symbol: str, order_id: str, exchange: ExchangeGateway = Depends(get_exchange)):
    result = await exchange.cancel_order(symbol.upper(), order_id)
    return OrderResponse.model_validate(result)
