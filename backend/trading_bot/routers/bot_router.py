"""
Bot Router

Start/stop, status and configuration of the trading bot.
"""

import logging

from fastapi import APIRouter, Depends

from trading_bot.dependencies import get_trading_bot
from trading_bot.schemas.bot import BotConfigRequest, BotStatusResponse
from trading_bot.trading_engine.trading_bot import TradingBot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bot", tags=["bot"])


@router.post("/start", response_model=BotStatusResponse)
async def start_bot(bot: TradingBot = Depends(get_trading_bot)):
    """Start trading; a no-op if already running"""
    await bot.start()
    return bot.get_status()


@router.post("/stop", response_model=BotStatusResponse)
async def stop_bot(bot: TradingBot = Depends(get_trading_bot)):
    """Stop trading; orders already submitted are not cancelled"""
    await bot.stop()
    return bot.get_status()


@router.get("/status", response_model=BotStatusResponse)
async def get_bot_status(bot: TradingBot = Depends(get_trading_bot)):
    return bot.get_status()


@router.put("/config", response_model=BotStatusResponse)
async def update_bot_config(request: BotConfigRequest, bot: TradingBot = Depends(get_trading_bot)):
    """
    Partially update the bot configuration.

    Invalid combinations (e.g. short SMA period >= long SMA period) are
    rejected with 400 and the previous configuration stays active.
    """
    await bot.update_config(request)
    return bot.get_status()
