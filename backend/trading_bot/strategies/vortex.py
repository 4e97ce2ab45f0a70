"""
Vortex Indicator (VI) strategy

VI+ measures upward trend movement, VI- downward movement. A buy fires when
VI+ crosses above VI-, a sell when it crosses below.

The bot samples close prices only, so each step's high/low is synthesized
from the current and previous close:
    high[i] = max(close[i], close[i-1])
    low[i]  = min(close[i], close[i-1])

Over the last `period` steps:
    VM+ = |high[i] - low[i-1]|
    VM- = |low[i] - high[i-1]|
    TR  = max(high[i] - low[i], |high[i] - close[i-1]|, |low[i] - close[i-1]|)
    VI+ = sum(VM+) / sum(TR),  VI- = sum(VM-) / sum(TR)

Each step needs the close two samples back for the previous synthetic
high/low, hence period + 2 samples are required.
"""

from decimal import Decimal
from typing import Optional, Sequence

from trading_bot.precision import divide_half_up
from trading_bot.strategies import IndicatorPair, IndicatorStrategy, StrategyRegistry, StrategyType


@StrategyRegistry.register
class VortexStrategy(IndicatorStrategy):
    strategy_type = StrategyType.VORTEX

    def __init__(self, period: int):
        self.period = period

    @classmethod
    def from_config(cls, config) -> "VortexStrategy":
        return cls(config.vortex_period)

    def required_data_points(self) -> int:
        return self.period + 2

    def compute_indicators(self, prices: Sequence[Decimal]) -> Optional[IndicatorPair]:
        if self.period <= 0 or len(prices) < self.required_data_points():
            return None

        sum_vm_plus = Decimal("0")
        sum_vm_minus = Decimal("0")
        sum_tr = Decimal("0")

        for i in range(len(prices) - self.period, len(prices)):
            curr = prices[i]
            prev = prices[i - 1]
            prev2 = prices[i - 2]

            high = max(curr, prev)
            low = min(curr, prev)
            prev_high = max(prev, prev2)
            prev_low = min(prev, prev2)

            sum_vm_plus += abs(high - prev_low)
            sum_vm_minus += abs(low - prev_high)
            sum_tr += max(high - low, abs(high - prev), abs(low - prev))

        # Flat window: no range to normalize by
        if sum_tr == 0:
            return None

        return IndicatorPair(
            fast=divide_half_up(sum_vm_plus, sum_tr),
            slow=divide_half_up(sum_vm_minus, sum_tr),
        )
