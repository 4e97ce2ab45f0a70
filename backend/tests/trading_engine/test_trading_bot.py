"""
Tests for backend/trading_bot/trading_engine/trading_bot.py

Covers:
- start/stop lifecycle and idempotence
- tick: missing price, insufficient data, baseline, BUY/SELL execution
- cooldown suppression
- position ledger across BUY then SELL
- exchange failures leave position and cooldown untouched
- per-symbol isolation inside one tick
- a config swap mid-tick defers the remaining symbols to the next tick
- update_config: SMA invariant, strategy switch baseline reset, symbols, hot fields
- get_status classification and recent price window

Price walk used by most tests (SMA 2/3):
    10, 10, 10 -> baseline fast=10 slow=10
    13         -> fast=11.5 slow=11 -> BUY
    5          -> fast=9 slow=9.33  -> SELL
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from trading_bot.constants import STATUS_BEARISH, STATUS_BULLISH, STATUS_INSUFFICIENT_DATA
from trading_bot.exceptions import ExchangeRejectedError, ExchangeUnavailableError, InvalidConfigurationError
from trading_bot.exchange_clients.base import OrderSide, OrderType
from trading_bot.schemas.bot import BotConfigRequest
from trading_bot.strategies import IndicatorPair, StrategyType
from trading_bot.trading_engine.trading_bot import TradingBot


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_bot(price_cache, exchange, portfolio, config, clock):
    return TradingBot(
        price_cache=price_cache,
        exchange=exchange,
        portfolio=portfolio,
        config=config,
        clock=clock,
    )


async def _feed(bot, price_cache, make_tick, prices, symbols=("BTCEUR",)):
    """Publish each price for every symbol and run one tick per price."""
    for price in prices:
        for symbol in symbols:
            price_cache.publish(make_tick(symbol=symbol, price=price))
        await bot.tick()


@pytest.fixture
def bot(price_cache, mock_exchange, mock_portfolio, engine_config, clock):
    return _make_bot(price_cache, mock_exchange, mock_portfolio, engine_config, clock)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initially_stopped(self, bot):
        assert bot.is_running is False
        assert bot.started_at is None

    @pytest.mark.asyncio
    async def test_start_records_start_time_and_state(self, bot, clock):
        await bot.start()
        assert bot.is_running is True
        assert bot.started_at == clock.now
        assert bot.symbol_state("BTCEUR") is not None

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, bot, clock):
        await bot.start()
        first_start = bot.started_at
        clock.advance(10)
        await bot.start()
        assert bot.is_running is True
        assert bot.started_at == first_start

    @pytest.mark.asyncio
    async def test_stop_twice_is_idempotent(self, bot):
        await bot.start()
        await bot.stop()
        assert bot.is_running is False
        assert bot.started_at is None
        await bot.stop()
        assert bot.is_running is False
        assert bot.started_at is None

    @pytest.mark.asyncio
    async def test_stop_when_never_started(self, bot):
        await bot.stop()
        assert bot.is_running is False

    @pytest.mark.asyncio
    async def test_tick_while_stopped_does_nothing(self, bot, price_cache, make_tick, mock_exchange):
        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"])
        assert bot.history("BTCEUR") == []
        mock_exchange.place_order.assert_not_awaited()


# ---------------------------------------------------------------------------
# Tick evaluation
# ---------------------------------------------------------------------------


class TestTickEvaluation:
    @pytest.mark.asyncio
    async def test_missing_price_skips_symbol(self, bot):
        await bot.start()
        await bot.tick()
        assert bot.history("BTCEUR") == []

    @pytest.mark.asyncio
    async def test_insufficient_data_only_appends(self, bot, price_cache, make_tick):
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "11"])
        assert bot.history("BTCEUR") == [Decimal("10"), Decimal("11")]
        assert bot.symbol_state("BTCEUR").previous_indicators is None

    @pytest.mark.asyncio
    async def test_first_computation_is_baseline_only(self, bot, price_cache, make_tick, mock_exchange):
        await bot.start()
        # The first computable pair is already bullish, but there is nothing to cross from
        await _feed(bot, price_cache, make_tick, ["10", "10", "13"])
        mock_exchange.place_order.assert_not_awaited()
        assert bot.symbol_state("BTCEUR").previous_indicators == IndicatorPair(
            fast=Decimal("11.50000000"), slow=Decimal("11.00000000")
        )

    @pytest.mark.asyncio
    async def test_bullish_crossover_places_market_buy(self, bot, price_cache, make_tick, mock_exchange, clock):
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"])

        # 1000 EUR * 0.5 / 13, floored to 8 digits
        mock_exchange.place_order.assert_awaited_once_with(
            "BTCEUR", OrderSide.BUY, OrderType.MARKET, Decimal("38.46153846")
        )
        state = bot.symbol_state("BTCEUR")
        assert state.net_position == Decimal("1.5")
        assert state.last_trade_time == clock.now

    @pytest.mark.asyncio
    async def test_no_order_without_crossover(self, bot, price_cache, make_tick, mock_exchange):
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "11", "12", "13", "14"])
        mock_exchange.place_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_buy_below_min_notional_places_no_order(
        self, price_cache, mock_exchange, mock_portfolio, make_config, make_tick, clock
    ):
        config = make_config(min_order_notional=Decimal("600"))
        bot = _make_bot(price_cache, mock_exchange, mock_portfolio, config, clock)
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"])
        mock_exchange.place_order.assert_not_awaited()
        assert bot.symbol_state("BTCEUR").last_trade_time is None

    @pytest.mark.asyncio
    async def test_missing_executed_quantity_falls_back_to_requested(
        self, bot, price_cache, make_tick, mock_exchange, make_order_result
    ):
        mock_exchange.place_order = AsyncMock(return_value=make_order_result(executed=None))
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"])
        assert bot.symbol_state("BTCEUR").net_position == Decimal("38.46153846")


# ---------------------------------------------------------------------------
# Cooldown
# ---------------------------------------------------------------------------


class TestCooldown:
    # After the BUY at 13: 7 gives fast == slow == 10 (no signal), 25 crosses above again
    PRICES_TO_FIRST_BUY = ["10", "10", "10", "13"]
    PRICES_TO_SECOND_BUY = ["7", "25"]

    @pytest.mark.asyncio
    async def test_second_buy_within_cooldown_is_suppressed(
        self, price_cache, mock_exchange, mock_portfolio, make_config, make_tick, clock
    ):
        bot = _make_bot(price_cache, mock_exchange, mock_portfolio, make_config(cooldown_seconds=60), clock)
        await bot.start()

        await _feed(bot, price_cache, make_tick, self.PRICES_TO_FIRST_BUY)
        first_trade_time = clock.now
        assert mock_exchange.place_order.await_count == 1

        for price in self.PRICES_TO_SECOND_BUY:
            clock.advance(15)
            await _feed(bot, price_cache, make_tick, [price])

        # Second BUY signal arrived at t=30
        assert mock_exchange.place_order.await_count == 1
        state = bot.symbol_state("BTCEUR")
        assert state.net_position == Decimal("1.5")
        assert state.last_trade_time == first_trade_time

    @pytest.mark.asyncio
    async def test_buy_after_cooldown_expires(
        self, price_cache, mock_exchange, mock_portfolio, make_config, make_tick, clock
    ):
        bot = _make_bot(price_cache, mock_exchange, mock_portfolio, make_config(cooldown_seconds=60), clock)
        await bot.start()

        await _feed(bot, price_cache, make_tick, self.PRICES_TO_FIRST_BUY)
        for price in self.PRICES_TO_SECOND_BUY:
            clock.advance(31)
            await _feed(bot, price_cache, make_tick, [price])

        assert mock_exchange.place_order.await_count == 2
        state = bot.symbol_state("BTCEUR")
        assert state.net_position == Decimal("3.0")
        assert state.last_trade_time == clock.now


# ---------------------------------------------------------------------------
# Position ledger and failures
# ---------------------------------------------------------------------------


class TestExecution:
    @pytest.mark.asyncio
    async def test_position_ledger_buy_then_sell(
        self, bot, price_cache, make_tick, mock_exchange, make_order_result
    ):
        mock_exchange.place_order = AsyncMock(side_effect=[
            make_order_result(side=OrderSide.BUY, executed="1.5"),
            make_order_result(side=OrderSide.SELL, executed="0.4"),
        ])
        await bot.start()

        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"])
        assert bot.symbol_state("BTCEUR").net_position == Decimal("1.5")

        await _feed(bot, price_cache, make_tick, ["5"])
        assert bot.symbol_state("BTCEUR").net_position == Decimal("1.1")

        # 10 BTC free * 0.5
        sell_call = mock_exchange.place_order.await_args_list[1]
        assert sell_call.args == ("BTCEUR", OrderSide.SELL, OrderType.MARKET, Decimal("5.00000000"))

    @pytest.mark.asyncio
    async def test_rejected_order_leaves_state_untouched(self, bot, price_cache, make_tick, mock_exchange):
        mock_exchange.place_order = AsyncMock(
            side_effect=ExchangeRejectedError("Account has insufficient balance", code=-2010)
        )
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"])

        mock_exchange.place_order.assert_awaited_once()
        state = bot.symbol_state("BTCEUR")
        assert state.net_position == Decimal("0")
        assert state.last_trade_time is None
        # Baseline moved to the evaluated pair, not rolled back
        assert state.previous_indicators == IndicatorPair(fast=Decimal("11.50000000"), slow=Decimal("11.00000000"))

    @pytest.mark.asyncio
    async def test_failed_trade_is_not_retried(self, bot, price_cache, make_tick, mock_exchange):
        mock_exchange.place_order = AsyncMock(side_effect=ExchangeUnavailableError())
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13", "13"])
        mock_exchange.place_order.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_balance_lookup_failure_skips_trade(self, bot, price_cache, make_tick, mock_exchange, mock_portfolio):
        mock_portfolio.get_balance = AsyncMock(side_effect=ExchangeUnavailableError("timeout"))
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"])
        mock_exchange.place_order.assert_not_awaited()
        assert bot.symbol_state("BTCEUR").last_trade_time is None

    @pytest.mark.asyncio
    async def test_failure_in_one_symbol_does_not_abort_others(
        self, price_cache, mock_exchange, mock_portfolio, make_config, make_tick, make_order_result, clock
    ):
        async def place_order(symbol, side, order_type, quantity, price=None):
            if symbol == "BTCEUR":
                raise RuntimeError("unexpected failure")
            return make_order_result(symbol=symbol, executed="2")

        mock_exchange.place_order = AsyncMock(side_effect=place_order)
        config = make_config(symbols=("BTCEUR", "ETHEUR"))
        bot = _make_bot(price_cache, mock_exchange, mock_portfolio, config, clock)
        await bot.start()

        await _feed(bot, price_cache, make_tick, ["10", "10", "10", "13"], symbols=("BTCEUR", "ETHEUR"))

        assert mock_exchange.place_order.await_count == 2
        assert bot.symbol_state("BTCEUR").net_position == Decimal("0")
        assert bot.symbol_state("ETHEUR").net_position == Decimal("2")

    @pytest.mark.asyncio
    async def test_config_swap_mid_tick_defers_remaining_symbols(
        self, price_cache, mock_exchange, mock_portfolio, make_config, make_tick, make_order_result, clock
    ):
        order_entered = asyncio.Event()
        release_order = asyncio.Event()

        async def place_order(symbol, side, order_type, quantity, price=None):
            order_entered.set()
            await release_order.wait()
            return make_order_result(symbol=symbol)

        mock_exchange.place_order = AsyncMock(side_effect=place_order)
        config = make_config(symbols=("AEUR", "BEUR"))
        bot = _make_bot(price_cache, mock_exchange, mock_portfolio, config, clock)
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10"], symbols=("AEUR", "BEUR"))

        # AEUR crosses and blocks inside place_order; BEUR would cross too
        price_cache.publish(make_tick(symbol="AEUR", price="13"))
        price_cache.publish(make_tick(symbol="BEUR", price="13"))
        tick_task = asyncio.create_task(bot.tick())
        await asyncio.wait_for(order_entered.wait(), timeout=1)

        await bot.update_config(BotConfigRequest(symbols=["CEUR"]))
        release_order.set()
        await asyncio.wait_for(tick_task, timeout=1)

        mock_exchange.place_order.assert_awaited_once()
        assert bot.history("AEUR") == [Decimal("10"), Decimal("10"), Decimal("10"), Decimal("13")]
        assert bot.history("BEUR") == [Decimal("10"), Decimal("10"), Decimal("10")]
        assert bot.symbol_state("BEUR").previous_indicators == IndicatorPair(
            fast=Decimal("10.00000000"), slow=Decimal("10.00000000")
        )

        # Next tick runs on the new snapshot only
        price_cache.publish(make_tick(symbol="CEUR", price="7"))
        await bot.tick()
        assert bot.history("CEUR") == [Decimal("7")]
        assert bot.history("BEUR") == [Decimal("10"), Decimal("10"), Decimal("10")]


# ---------------------------------------------------------------------------
# Configuration updates
# ---------------------------------------------------------------------------


class TestUpdateConfig:
    @pytest.mark.asyncio
    async def test_short_not_less_than_long_is_rejected(self, bot, engine_config):
        with pytest.raises(InvalidConfigurationError, match="shortSmaPeriod"):
            await bot.update_config(BotConfigRequest(short_sma_period=10))
        assert bot.config is engine_config

    @pytest.mark.asyncio
    async def test_partial_sma_update_resolves_against_current(self, bot):
        config = await bot.update_config(BotConfigRequest(long_sma_period=10))
        assert config.sma_short_period == 2
        assert config.sma_long_period == 10
        assert bot.config is config

    @pytest.mark.asyncio
    async def test_rejected_update_applies_nothing(self, bot, engine_config):
        with pytest.raises(InvalidConfigurationError):
            await bot.update_config(BotConfigRequest(cooldown_seconds=5, short_sma_period=5, long_sma_period=4))
        assert bot.config.cooldown_seconds == engine_config.cooldown_seconds

    @pytest.mark.asyncio
    async def test_scalar_fields_replaced(self, bot):
        config = await bot.update_config(BotConfigRequest(
            order_size_fraction=Decimal("0.25"),
            cooldown_seconds=120,
            min_order_notional=Decimal("5"),
            sampling_interval_seconds=30,
            vortex_period=21,
        ))
        assert config.order_size_fraction == Decimal("0.25")
        assert config.cooldown_seconds == 120
        assert config.min_order_notional == Decimal("5")
        assert config.sampling_interval_seconds == 30
        assert config.vortex_period == 21

    @pytest.mark.asyncio
    async def test_symbols_replaced_and_old_state_kept(self, bot, price_cache, make_tick):
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10"])

        config = await bot.update_config(BotConfigRequest(symbols=["etheur", "solEUR"]))

        assert config.symbols == ("ETHEUR", "SOLEUR")
        assert bot.symbol_state("ETHEUR") is not None
        assert bot.symbol_state("SOLEUR") is not None
        assert bot.symbol_state("BTCEUR") is not None
        assert bot.history("BTCEUR") == [Decimal("10")]

    @pytest.mark.asyncio
    async def test_empty_symbol_list_keeps_current(self, bot, engine_config):
        config = await bot.update_config(BotConfigRequest(symbols=[]))
        assert config.symbols == engine_config.symbols

    @pytest.mark.asyncio
    async def test_strategy_switch_resets_baseline(self, bot, price_cache, make_tick, mock_exchange):
        await bot.start()
        # SMA baseline 10/10 stored (fast == slow)
        await _feed(bot, price_cache, make_tick, ["10"] * 7)
        assert bot.symbol_state("BTCEUR").previous_indicators is not None

        await bot.update_config(BotConfigRequest(strategy=StrategyType.VORTEX, vortex_period=5))
        assert bot.symbol_state("BTCEUR").previous_indicators is None

        # Vortex pair is (1, 0): a BUY against the old 10/10 baseline, baseline only now
        await _feed(bot, price_cache, make_tick, ["20"])
        mock_exchange.place_order.assert_not_awaited()
        assert bot.symbol_state("BTCEUR").previous_indicators == IndicatorPair(
            fast=Decimal("1.00000000"), slow=Decimal("0E-8")
        )

    @pytest.mark.asyncio
    async def test_same_strategy_keeps_baseline(self, bot, price_cache, make_tick, mock_exchange):
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10"])

        await bot.update_config(BotConfigRequest(strategy=StrategyType.SMA, cooldown_seconds=0))
        await _feed(bot, price_cache, make_tick, ["13"])

        mock_exchange.place_order.assert_awaited_once()


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_before_data(self, bot):
        status = bot.get_status()
        assert status.running is False
        assert status.strategy == StrategyType.SMA
        symbol_status = status.symbols["BTCEUR"]
        assert symbol_status.signal == STATUS_INSUFFICIENT_DATA
        assert symbol_status.current_price is None
        assert symbol_status.price_history_size == 0
        assert symbol_status.required_data_points == 3
        assert symbol_status.position_quantity == Decimal("0")

    @pytest.mark.asyncio
    async def test_status_bullish(self, bot, price_cache, make_tick):
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "13"])
        symbol_status = bot.get_status().symbols["BTCEUR"]
        assert symbol_status.signal == STATUS_BULLISH
        assert symbol_status.fast_indicator == Decimal("11.50000000")
        assert symbol_status.slow_indicator == Decimal("11.00000000")
        assert symbol_status.current_price == Decimal("13")

    @pytest.mark.asyncio
    async def test_status_flat_history_is_bearish(self, bot, price_cache, make_tick):
        await bot.start()
        await _feed(bot, price_cache, make_tick, ["10", "10", "10"])
        symbol_status = bot.get_status().symbols["BTCEUR"]
        assert symbol_status.fast_indicator == Decimal("10.00000000")
        assert symbol_status.slow_indicator == Decimal("10.00000000")
        assert symbol_status.signal == STATUS_BEARISH

    @pytest.mark.asyncio
    async def test_recent_prices_truncated_to_ten(self, bot, price_cache, make_tick):
        await bot.start()
        await _feed(bot, price_cache, make_tick, [str(i) for i in range(1, 13)])
        symbol_status = bot.get_status().symbols["BTCEUR"]
        assert symbol_status.price_history_size == 12
        assert symbol_status.recent_prices == [Decimal(i) for i in range(3, 13)]

    @pytest.mark.asyncio
    async def test_status_reflects_running_and_config(self, bot, clock):
        await bot.start()
        status = bot.get_status()
        assert status.running is True
        assert status.started_at == clock.now
        assert status.short_sma_period == 2
        assert status.long_sma_period == 3
        assert status.quote_asset == "EUR"
