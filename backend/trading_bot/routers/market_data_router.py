"""
Market Data Router

Latest cached ticks from the market data feed.
"""

from typing import List

from fastapi import APIRouter, Depends

from trading_bot.dependencies import get_price_cache
from trading_bot.exceptions import NotFoundError
from trading_bot.price_feeds.cache import PriceFeedCache
from trading_bot.schemas.market import PriceTickResponse

router = APIRouter(prefix="/api/market", tags=["market-data"])


@router.get("/prices", response_model=List[PriceTickResponse])
async def get_prices(cache: PriceFeedCache = Depends(get_price_cache)):
    ticks = cache.all_latest()
    return [PriceTickResponse.model_validate(ticks[symbol]) for symbol in sorted(ticks)]


@router.get("/prices/{symbol}", response_model=PriceTickResponse)
async def get_price(symbol: str, cache: PriceFeedCache = Depends(get_price_cache)):
    tick = cache.latest(symbol)
    if tick is None:
        raise NotFoundError(f"No price available for {symbol.upper()}")
    return PriceTickResponse.model_validate(tick)
