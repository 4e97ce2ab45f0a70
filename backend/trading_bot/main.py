import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trading_bot.config import settings
from trading_bot.dependencies import Components, set_components
from trading_bot.exceptions import AppError
from trading_bot.exchange_clients.factory import create_exchange_client, create_market_data_feed
from trading_bot.price_feeds.base import MarketDataFeed
from trading_bot.price_feeds.cache import PriceFeedCache
from trading_bot.routers import bot_router, market_data_router, order_router, portfolio_router
from trading_bot.trading_engine.bot_state import EngineConfig
from trading_bot.trading_engine.scheduler import BotScheduler
from trading_bot.trading_engine.trading_bot import TradingBot

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Crossover Trading Bot")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bot_router.router)
app.include_router(market_data_router.router)
app.include_router(portfolio_router.router)
app.include_router(order_router.router)

# Background components, created on startup
market_feed: MarketDataFeed = None
scheduler: BotScheduler = None
exchange_client = None


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Translate domain exceptions into JSON error responses"""
    content = {"detail": exc.message}
    code = getattr(exc, "code", None)
    if code is not None:
        content["code"] = code
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/api/health")
async def health():
    return {"status": "ok", "trading_mode": settings.trading_mode}


@app.on_event("startup")
async def startup_event():
    global market_feed, scheduler, exchange_client

    logger.info(f"Starting trading bot service (mode={settings.trading_mode})")

    price_cache = PriceFeedCache()
    exchange_client = create_exchange_client(settings, price_cache)
    market_feed = create_market_data_feed(settings, price_cache)

    bot = TradingBot(
        price_cache=price_cache,
        exchange=exchange_client,
        portfolio=exchange_client,
        config=EngineConfig.from_settings(settings),
    )
    set_components(Components(price_cache=price_cache, exchange=exchange_client, portfolio=exchange_client, bot=bot))

    await market_feed.start()
    scheduler = BotScheduler(bot)
    scheduler.start()

    if settings.bot_enabled:
        await bot.start()

    logger.info("Startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down - stopping scheduler and market data feed...")

    if scheduler:
        await scheduler.stop()
    if market_feed:
        await market_feed.stop()
    if hasattr(exchange_client, "close"):
        await exchange_client.close()

    set_components(None)
    logger.info("Shutdown complete")


def run():
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
