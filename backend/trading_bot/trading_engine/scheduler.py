"""
Bot Scheduler

Periodic trigger for TradingBot.tick(). Fixed delay: the next tick starts
sampling_interval_seconds after the previous one finished, so ticks never
overlap. The interval is re-read from the active config every cycle.
"""

import asyncio
import logging
from typing import Optional

from trading_bot.trading_engine.trading_bot import TradingBot

logger = logging.getLogger(__name__)


class BotScheduler:
    def __init__(self, bot: TradingBot):
        self.bot = bot
        self.running = False
        self.task: Optional[asyncio.Task] = None

    async def run_once(self):
        """Run a single tick if the bot is running; errors are logged, not raised."""
        if not self.bot.is_running:
            return
        try:
            await self.bot.tick()
        except Exception as e:
            logger.error(f"Error in bot tick: {e}", exc_info=True)

    async def run_loop(self):
        logger.info("Bot scheduler loop started")
        while self.running:
            await self.run_once()
            await asyncio.sleep(self.bot.config.sampling_interval_seconds)

    def start(self):
        if self.running:
            logger.warning("Bot scheduler already running")
            return
        self.running = True
        self.task = asyncio.create_task(self.run_loop(), name="bot-scheduler")
        logger.info("Bot scheduler started")

    async def stop(self):
        self.running = False
        if self.task is not None:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None
        logger.info("Bot scheduler stopped")
