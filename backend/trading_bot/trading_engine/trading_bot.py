"""
Trading Bot Orchestrator

State machine driving the crossover strategy:

    Stopped --start()--> Running --stop()--> Stopped

Every tick() (only while Running) walks the configured symbols in order:
sample the cached price, append it to the history, compute the indicator
pair, compare with the stored baseline and, on a crossover outside the
cooldown window, size and place a market order.

Locking:
- start/stop/update_config and the evaluate phase of each symbol run under
  one asyncio.Lock
- the lock is released before any balance lookup or order placement, so a
  slow exchange never stalls the control surface
- symbols are processed one after another; a slow exchange call delays the
  remaining symbols of the same cycle
- a tick works on the snapshot it started with; if update_config replaces
  it mid-cycle, the remaining symbols wait for the next tick
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from trading_bot.constants import (
    RECENT_PRICES_WINDOW,
    STATUS_BEARISH,
    STATUS_BULLISH,
    STATUS_INSUFFICIENT_DATA,
    STATUS_NONE,
)
from trading_bot.exceptions import ExchangeError, InvalidConfigurationError
from trading_bot.exchange_clients.base import ExchangeGateway, OrderSide, OrderType, PortfolioGateway
from trading_bot.price_feeds.cache import PriceFeedCache
from trading_bot.schemas.bot import BotConfigRequest, BotStatusResponse, SymbolBotStatus
from trading_bot.strategies import IndicatorPair
from trading_bot.trading_engine.bot_state import EngineConfig, SymbolState
from trading_bot.trading_engine.history import HistoryBuffer
from trading_bot.trading_engine.position_sizing import calculate_buy_quantity, calculate_sell_quantity
from trading_bot.trading_engine.signal_detector import Signal, detect_signal

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TradingBot:
    """
    Crossover trading bot for a set of symbols.

    Args:
        price_cache: Latest tick per symbol, written by the market data feed
        exchange: Order entry gateway
        portfolio: Balance gateway
        config: Initial configuration snapshot
        clock: Returns the current aware datetime (injectable for tests)
    """

    def __init__(
        self,
        price_cache: PriceFeedCache,
        exchange: ExchangeGateway,
        portfolio: PortfolioGateway,
        config: EngineConfig,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.price_cache = price_cache
        self.exchange = exchange
        self.portfolio = portfolio
        self._clock = clock

        self._config = config
        self._history = HistoryBuffer()
        self._states: Dict[str, SymbolState] = {}
        self._lock = asyncio.Lock()

        self._running = False
        self._started_at: Optional[datetime] = None

    # ----------------------------------------------------------
    # Accessors
    # ----------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        """Active configuration snapshot"""
        return self._config

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def started_at(self) -> Optional[datetime]:
        return self._started_at

    def symbol_state(self, symbol: str) -> Optional[SymbolState]:
        """Copy of one symbol's state, or None if it was never tracked"""
        state = self._states.get(symbol.upper())
        return state.snapshot() if state is not None else None

    def history(self, symbol: str) -> List[Decimal]:
        return self._history.snapshot(symbol.upper())

    def _ensure_state(self, symbol: str) -> SymbolState:
        state = self._states.get(symbol)
        if state is None:
            state = SymbolState(symbol=symbol)
            self._states[symbol] = state
        return state

    # ----------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------

    async def start(self):
        async with self._lock:
            if self._running:
                logger.warning("Trading bot is already running")
                return

            for symbol in self._config.symbols:
                self._ensure_state(symbol)
            self._running = True
            self._started_at = self._clock()

        logger.info(
            f"Trading bot started: strategy={self._config.strategy.value}, "
            f"symbols={list(self._config.symbols)}, interval={self._config.sampling_interval_seconds}s"
        )

    async def stop(self):
        """Prevent future ticks. Orders already in flight are not cancelled."""
        async with self._lock:
            if not self._running:
                logger.warning("Trading bot is already stopped")
                return

            self._running = False
            self._started_at = None

        logger.info("Trading bot stopped")

    async def update_config(self, request: BotConfigRequest) -> EngineConfig:
        """
        Apply a partial configuration update as one new snapshot.

        Args:
            request: Fields to change; None means keep the current value

        Returns:
            The new active configuration

        Raises:
            InvalidConfigurationError: Resolved configuration breaks an invariant.
                The previous snapshot stays active.
        """
        async with self._lock:
            current = self._config
            changes = {}

            strategy_changed = request.strategy is not None and request.strategy != current.strategy
            if strategy_changed:
                changes["strategy"] = request.strategy

            if request.short_sma_period is not None or request.long_sma_period is not None:
                short_period = request.short_sma_period or current.sma_short_period
                long_period = request.long_sma_period or current.sma_long_period
                if short_period >= long_period:
                    raise InvalidConfigurationError(
                        f"shortSmaPeriod ({short_period}) must be less than longSmaPeriod ({long_period})"
                    )
                changes["sma_short_period"] = short_period
                changes["sma_long_period"] = long_period

            if request.vortex_period is not None:
                changes["vortex_period"] = request.vortex_period
            if request.sampling_interval_seconds is not None:
                changes["sampling_interval_seconds"] = request.sampling_interval_seconds
            if request.order_size_fraction is not None:
                changes["order_size_fraction"] = request.order_size_fraction
            if request.cooldown_seconds is not None:
                changes["cooldown_seconds"] = request.cooldown_seconds
            if request.min_order_notional is not None:
                changes["min_order_notional"] = request.min_order_notional
            if request.symbols:
                changes["symbols"] = tuple(dict.fromkeys(s.upper() for s in request.symbols))

            # Validates in __post_init__; raises before anything is committed
            new_config = replace(current, **changes)

            if strategy_changed:
                for state in self._states.values():
                    state.previous_indicators = None
            # Symbols dropped from the list keep their state
            for symbol in new_config.symbols:
                self._ensure_state(symbol)
            self._config = new_config

        if strategy_changed:
            logger.info(
                f"Strategy switched {current.strategy.value} -> {new_config.strategy.value}, "
                f"indicator baselines cleared"
            )
        logger.info(f"Bot configuration updated: {sorted(changes)}")
        return new_config

    # ----------------------------------------------------------
    # Tick
    # ----------------------------------------------------------

    async def tick(self):
        """Run one evaluation cycle over every configured symbol."""
        if not self._running:
            return

        config = self._config
        for symbol in config.symbols:
            if self._config is not config:
                logger.info(
                    f"Configuration replaced mid-cycle, deferring {symbol} and remaining symbols to the next tick"
                )
                return
            try:
                await self._process_symbol(symbol, config)
            except Exception as e:
                logger.error(f"{symbol}: error during tick: {e}", exc_info=True)

    async def _process_symbol(self, symbol: str, config: EngineConfig):
        async with self._lock:
            # update_config may have landed while the previous symbol was trading
            if self._config is not config:
                return

            tick = self.price_cache.latest(symbol)
            if tick is None:
                logger.debug(f"{symbol}: no price available yet, skipping")
                return

            self._history.append(symbol, tick.price)
            state = self._ensure_state(symbol)
            signal = self._evaluate(symbol, state, config)
            if signal == Signal.NONE:
                return

            if self._in_cooldown(symbol, state, config):
                return

        # Lock released: balance lookups and order placement may block
        await self._execute(symbol, signal, tick.price, config)

    def _evaluate(self, symbol: str, state: SymbolState, config: EngineConfig) -> Signal:
        strategy = config.build_strategy()
        history = self._history.snapshot(symbol)
        required = strategy.required_data_points()

        if len(history) < required:
            logger.debug(f"{symbol}: insufficient data ({len(history)}/{required})")
            return Signal.NONE

        current = strategy.compute_indicators(history)
        if current is None:
            logger.debug(f"{symbol}: indicators not computable for [{config.strategy.value}]")
            return Signal.NONE

        previous = state.previous_indicators
        state.previous_indicators = current
        if previous is None:
            logger.debug(
                f"{symbol}: baseline established [{config.strategy.value}] "
                f"fast={current.fast} slow={current.slow}"
            )
            return Signal.NONE

        signal = detect_signal(previous, current)
        if signal != Signal.NONE:
            logger.info(
                f"{symbol}: {signal.value} signal detected [{config.strategy.value}] "
                f"fast={current.fast} slow={current.slow}"
            )
        return signal

    def _in_cooldown(self, symbol: str, state: SymbolState, config: EngineConfig) -> bool:
        if state.last_trade_time is None:
            return False
        elapsed = (self._clock() - state.last_trade_time).total_seconds()
        if elapsed < config.cooldown_seconds:
            logger.warning(
                f"{symbol}: signal suppressed - cooldown active "
                f"({elapsed:.0f}s since last trade, cooldown {config.cooldown_seconds}s)"
            )
            return True
        return False

    async def _execute(self, symbol: str, signal: Signal, reference_price: Decimal, config: EngineConfig):
        side = OrderSide.BUY if signal == Signal.BUY else OrderSide.SELL
        sizer = calculate_buy_quantity if side == OrderSide.BUY else calculate_sell_quantity

        try:
            quantity = await sizer(
                self.portfolio,
                symbol,
                config.quote_asset,
                reference_price,
                config.order_size_fraction,
                config.min_order_notional,
            )
        except ExchangeError as e:
            logger.error(f"{symbol}: {side.value} skipped - balance lookup failed: {e.message} (code={e.code})")
            return

        if quantity is None:
            return

        logger.info(f"{symbol}: placing {side.value} MARKET qty={quantity} ref_price={reference_price}")
        try:
            result = await self.exchange.place_order(symbol, side, OrderType.MARKET, quantity)
        except ExchangeError as e:
            logger.error(f"{symbol}: {side.value} order FAILED - {e.message} (code={e.code})")
            return

        executed = result.executed_quantity if result.executed_quantity is not None else quantity
        signed = executed if side == OrderSide.BUY else -executed

        async with self._lock:
            state = self._ensure_state(symbol)
            state.net_position += signed
            state.last_trade_time = self._clock()
            position = state.net_position

        logger.info(
            f"{symbol}: {side.value} order {result.exchange_order_id} {result.status} "
            f"executed={executed} position={position}"
        )

    # ----------------------------------------------------------
    # Status
    # ----------------------------------------------------------

    def get_status(self) -> BotStatusResponse:
        """Point-in-time view of the bot; never raises for missing data."""
        config = self._config
        strategy = config.build_strategy()
        required = strategy.required_data_points()

        symbols: Dict[str, SymbolBotStatus] = {}
        for symbol in config.symbols:
            history = self._history.snapshot(symbol)
            state = self.symbol_state(symbol) or SymbolState(symbol=symbol)
            indicators = strategy.compute_indicators(history) if len(history) >= required else None
            tick = self.price_cache.latest(symbol)

            symbols[symbol] = SymbolBotStatus(
                symbol=symbol,
                current_price=tick.price if tick is not None else None,
                fast_indicator=indicators.fast if indicators else None,
                slow_indicator=indicators.slow if indicators else None,
                signal=self._classify(len(history), required, indicators),
                price_history_size=len(history),
                required_data_points=required,
                position_quantity=state.net_position,
                last_trade_time=state.last_trade_time,
                recent_prices=history[-RECENT_PRICES_WINDOW:],
            )

        return BotStatusResponse(
            running=self._running,
            started_at=self._started_at,
            strategy=config.strategy,
            short_sma_period=config.sma_short_period,
            long_sma_period=config.sma_long_period,
            vortex_period=config.vortex_period,
            sampling_interval_seconds=config.sampling_interval_seconds,
            order_size_fraction=config.order_size_fraction,
            cooldown_seconds=config.cooldown_seconds,
            min_order_notional=config.min_order_notional,
            quote_asset=config.quote_asset,
            symbols=symbols,
        )

    @staticmethod
    def _classify(history_size: int, required: int, indicators: Optional[IndicatorPair]) -> str:
        if history_size < required:
            return STATUS_INSUFFICIENT_DATA
        if indicators is None:
            return STATUS_NONE
        if indicators.fast > indicators.slow:
            return STATUS_BULLISH
        return STATUS_BEARISH
