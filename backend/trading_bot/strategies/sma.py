"""
Simple Moving Average crossover strategy

fast = mean of the last short_period closes
slow = mean of the last long_period closes
"""

from decimal import Decimal
from typing import Optional, Sequence

from trading_bot.precision import divide_half_up
from trading_bot.strategies import IndicatorPair, IndicatorStrategy, StrategyRegistry, StrategyType


def calculate_sma(prices: Sequence[Decimal], period: int) -> Optional[Decimal]:
    """Mean of the last `period` prices at 8 fraction digits (half-up), None if too short."""
    if period <= 0 or len(prices) < period:
        return None
    window = prices[len(prices) - period:]
    return divide_half_up(sum(window, Decimal("0")), Decimal(period))


@StrategyRegistry.register
class SmaStrategy(IndicatorStrategy):
    strategy_type = StrategyType.SMA

    def __init__(self, short_period: int, long_period: int):
        self.short_period = short_period
        self.long_period = long_period

    @classmethod
    def from_config(cls, config) -> "SmaStrategy":
        return cls(config.sma_short_period, config.sma_long_period)

    def required_data_points(self) -> int:
        return self.long_period

    def compute_indicators(self, prices: Sequence[Decimal]) -> Optional[IndicatorPair]:
        if len(prices) < self.required_data_points():
            return None
        short_sma = calculate_sma(prices, self.short_period)
        long_sma = calculate_sma(prices, self.long_period)
        if short_sma is None or long_sma is None:
            return None
        return IndicatorPair(fast=short_sma, slow=long_sma)
