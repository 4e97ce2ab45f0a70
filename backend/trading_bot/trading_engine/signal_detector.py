"""
Crossover signal detection

Compares two consecutive (fast, slow) indicator pairs:
- BUY:  fast was at or below slow, and is now above it
- SELL: fast was at or above slow, and is now below it

At prev.fast == prev.slow both guards can hold; BUY is checked first.
"""

from enum import Enum
from typing import Optional

from trading_bot.strategies import IndicatorPair


class Signal(str, Enum):
    NONE = "NONE"
    BUY = "BUY"
    SELL = "SELL"


def detect_signal(previous: Optional[IndicatorPair], current: Optional[IndicatorPair]) -> Signal:
    if previous is None or current is None:
        return Signal.NONE

    if previous.fast <= previous.slow and current.fast > current.slow:
        return Signal.BUY
    if previous.fast >= previous.slow and current.fast < current.slow:
        return Signal.SELL
    return Signal.NONE
