"""
Binance Stream Feed

Implements MarketDataFeed over Binance Spot WebSocket streams.

Every (symbol, stream) subscription gets its own pair of tasks:
- a receiver that reads the socket into a bounded asyncio.Queue
  (oldest message dropped when full, only the latest value matters)
- a worker that drains the queue and publishes ticks into the cache

Streams used:
- <symbol>@miniTicker: close price, base volume and close-open change
- <symbol>@trade: individual trades, logged at DEBUG only
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from trading_bot.constants import STREAM_QUEUE_SIZE, STREAM_RECONNECT_DELAY_SECONDS
from trading_bot.precision import to_decimal
from trading_bot.price_feeds.base import MarketDataFeed, PriceTick
from trading_bot.price_feeds.cache import PriceFeedCache

logger = logging.getLogger(__name__)

MINI_TICKER_STREAM = "miniTicker"
TRADE_STREAM = "trade"


def parse_mini_ticker(message: dict) -> Optional[PriceTick]:
    """
    Convert a 24hrMiniTicker event into a PriceTick.

    Example payload:
        {"e": "24hrMiniTicker", "E": 1700000000000, "s": "BTCEUR",
         "c": "60000.10", "o": "59000.00", "h": "...", "l": "...",
         "v": "123.4", "q": "..."}
    """
    symbol = message.get("s")
    close = message.get("c")
    if not symbol or close is None:
        return None

    close_price = to_decimal(close)
    open_price = message.get("o")
    volume = message.get("v")
    event_ms = message.get("E")

    return PriceTick(
        symbol=symbol.upper(),
        price=close_price,
        event_time=(
            datetime.fromtimestamp(event_ms / 1000, tz=timezone.utc)
            if event_ms is not None
            else datetime.now(timezone.utc)
        ),
        volume=to_decimal(volume) if volume is not None else None,
        price_change=close_price - to_decimal(open_price) if open_price is not None else None,
    )


class BinanceStreamFeed(MarketDataFeed):
    """
    Live market data from Binance Spot streams.

    stop() sets the shared shutdown event, which receivers and workers check
    between reads, then cancels and awaits every task so a blocked socket
    read cannot hold up process exit.
    """

    def __init__(
        self,
        cache: PriceFeedCache,
        symbols: List[str],
        stream_url: str,
        include_trades: bool = True,
        reconnect_delay: float = STREAM_RECONNECT_DELAY_SECONDS,
        queue_size: int = STREAM_QUEUE_SIZE,
    ):
        super().__init__(name="binance")
        self.cache = cache
        self.symbols = [s.upper() for s in symbols]
        self.stream_url = stream_url.rstrip("/")
        self.include_trades = include_trades
        self.reconnect_delay = reconnect_delay
        self.queue_size = queue_size

        self._stop_event = asyncio.Event()
        self._tasks: List[asyncio.Task] = []
        self._queues: Dict[Tuple[str, str], asyncio.Queue] = {}

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def stream_names(self) -> List[str]:
        streams = [MINI_TICKER_STREAM]
        if self.include_trades:
            streams.append(TRADE_STREAM)
        return streams

    def stream_endpoint(self, symbol: str, stream: str) -> str:
        return f"{self.stream_url}/ws/{symbol.lower()}@{stream}"

    async def start(self):
        if self.running:
            logger.warning("Binance stream feed already running")
            return
        if not self.symbols:
            logger.warning("No symbols configured - WebSocket streams will not start")
            return

        self._stop_event.clear()
        for symbol in self.symbols:
            for stream in self.stream_names():
                queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
                self._queues[(symbol, stream)] = queue
                self._tasks.append(
                    asyncio.create_task(self._receive(symbol, stream, queue), name=f"ws-recv-{stream}-{symbol}")
                )
                self._tasks.append(
                    asyncio.create_task(self._consume(symbol, stream, queue), name=f"ws-{stream}-{symbol}")
                )

        logger.info(f"WebSocket streams started for symbols: {self.symbols}")

    async def stop(self):
        logger.info("Shutting down WebSocket streams...")
        self._stop_event.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self._queues.clear()
        logger.info("WebSocket streams stopped")

    # ----------------------------------------------------------
    # Workers
    # ----------------------------------------------------------

    async def _receive(self, symbol: str, stream: str, queue: asyncio.Queue):
        """Read the socket into the bounded queue, reconnecting on drops."""
        url = self.stream_endpoint(symbol, stream)
        while not self._stop_event.is_set():
            try:
                async with websockets.connect(url, ping_interval=20) as websocket:
                    logger.debug(f"Connected to {url}")
                    async for message in websocket:
                        if self._stop_event.is_set():
                            break
                        self._offer(queue, message)
            except ConnectionClosed as e:
                logger.warning(f"{symbol} {stream} stream closed: {e}. Reconnecting...")
            except (WebSocketException, OSError) as e:
                logger.error(f"{symbol} {stream} stream connection failed: {e}")

            if not self._stop_event.is_set():
                await self._wait_for_stop(self.reconnect_delay)

    async def _consume(self, symbol: str, stream: str, queue: asyncio.Queue):
        """Drain the queue and publish into the cache until shutdown."""
        logger.debug(f"{stream} polling started for {symbol}")
        while not self._stop_event.is_set():
            message = await queue.get()
            try:
                self.handle_message(stream, message)
            except Exception as e:
                logger.error(f"Error processing {stream} for {symbol}: {e}")
            finally:
                queue.task_done()

    @staticmethod
    def _offer(queue: asyncio.Queue, message):
        """Enqueue without blocking, dropping the oldest message when full."""
        if queue.full():
            queue.get_nowait()
            queue.task_done()
        queue.put_nowait(message)

    async def _wait_for_stop(self, timeout: float):
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass

    # ----------------------------------------------------------
    # Message handling
    # ----------------------------------------------------------

    def handle_message(self, stream: str, raw) -> Optional[PriceTick]:
        """Decode one stream message; mini tickers are published, trades logged."""
        message = json.loads(raw) if isinstance(raw, (str, bytes)) else raw

        if stream == MINI_TICKER_STREAM:
            tick = parse_mini_ticker(message)
            if tick is not None:
                self.cache.publish(tick)
            return tick

        if stream == TRADE_STREAM:
            # m = buyer is maker, so the aggressor was the seller
            logger.debug(
                f"Trade {message.get('s')} {'SELL' if message.get('m') else 'BUY'} "
                f"price={message.get('p')} qty={message.get('q')}"
            )
        return None
