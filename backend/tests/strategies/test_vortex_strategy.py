"""
Tests for backend/trading_bot/strategies/vortex.py

Covers:
- required data points (period + 2)
- absent below the requirement
- zero true range guard
- VI+ / VI- on rising and falling closes
"""

from decimal import Decimal
from types import SimpleNamespace

from trading_bot.strategies import StrategyRegistry, StrategyType
from trading_bot.strategies.vortex import VortexStrategy


def _prices(*values):
    return [Decimal(str(v)) for v in values]


class TestVortexStrategy:
    def test_required_data_points(self):
        assert VortexStrategy(14).required_data_points() == 16

    def test_absent_for_every_history_shorter_than_required(self):
        strategy = VortexStrategy(3)
        history = _prices(1, 2, 3, 4, 5, 6)
        for length in range(0, 5):
            assert strategy.compute_indicators(history[:length]) is None

    def test_flat_window_returns_none(self):
        strategy = VortexStrategy(3)
        assert strategy.compute_indicators(_prices(5, 5, 5, 5, 5)) is None

    def test_rising_prices(self):
        # Each step: high=curr, low=prev, prev_high=prev, prev_low=prev2
        # VM+ = 2, VM- = 0, TR = 1 for every step
        pair = VortexStrategy(3).compute_indicators(_prices(1, 2, 3, 4, 5))
        assert pair.fast == Decimal("2.00000000")
        assert pair.slow == Decimal("0E-8")
        assert pair.fast > pair.slow

    def test_falling_prices(self):
        pair = VortexStrategy(3).compute_indicators(_prices(5, 4, 3, 2, 1))
        assert pair.fast == Decimal("0E-8")
        assert pair.slow == Decimal("2.00000000")
        assert pair.fast < pair.slow

    def test_uses_only_last_window(self):
        strategy = VortexStrategy(3)
        tail = _prices(1, 2, 3, 4, 5)
        assert strategy.compute_indicators(_prices(100, 3, 90) + tail) == strategy.compute_indicators(tail)

    def test_built_from_config(self):
        config = SimpleNamespace(sma_short_period=7, sma_long_period=25, vortex_period=9)
        strategy = StrategyRegistry.build(StrategyType.VORTEX, config)
        assert isinstance(strategy, VortexStrategy)
        assert strategy.required_data_points() == 11
