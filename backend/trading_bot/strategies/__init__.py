"""
Indicator Strategy Framework

This module provides the capability contract shared by every indicator
strategy and a registry keyed by strategy type. Each strategy turns a
rolling close-price history into a (fast, slow) indicator pair; crossover
detection on those pairs lives in the trading engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class StrategyType(str, Enum):
    SMA = "SMA"
    VORTEX = "VORTEX"


@dataclass(frozen=True)
class IndicatorPair:
    """Fast and slow indicator lines computed from one history snapshot"""

    fast: Decimal
    slow: Decimal


class IndicatorStrategy(ABC):
    """
    Base class for indicator strategies.

    Each strategy must implement:
    - required_data_points(): Minimum history length before computing
    - compute_indicators(): (fast, slow) pair or None when it cannot be computed

    Strategies are pure: the same history and periods always produce the
    same pair, and no state is kept between calls.
    """

    strategy_type: StrategyType

    @abstractmethod
    def required_data_points(self) -> int:
        pass

    @abstractmethod
    def compute_indicators(self, prices: Sequence[Decimal]) -> Optional[IndicatorPair]:
        """
        Compute indicator values from price history.

        Args:
            prices: Close prices, most recent last

        Returns:
            IndicatorPair, or None if there is insufficient data
        """
        pass

    @classmethod
    @abstractmethod
    def from_config(cls, config: Any) -> "IndicatorStrategy":
        """Build an instance from an engine configuration snapshot"""
        pass


class StrategyRegistry:
    """Registry of all available indicator strategies"""

    _strategies: Dict[StrategyType, type] = {}

    @classmethod
    def register(cls, strategy_class: type):
        """Register a strategy class under its strategy_type"""
        cls._strategies[strategy_class.strategy_type] = strategy_class
        return strategy_class

    @classmethod
    def build(cls, strategy_type: StrategyType, config: Any) -> IndicatorStrategy:
        """Get an instance of a strategy configured from a config snapshot"""
        strategy_type = StrategyType(strategy_type)
        if strategy_type not in cls._strategies:
            raise ValueError(f"Unknown strategy: {strategy_type}")
        return cls._strategies[strategy_type].from_config(config)

    @classmethod
    def list_strategies(cls) -> List[StrategyType]:
        return list(cls._strategies.keys())


# Import all strategy implementations to trigger registration
# Must be after StrategyRegistry class definition for decorators to work
from trading_bot.strategies import sma, vortex  # noqa: E402

__all__ = [
    "IndicatorPair",
    "IndicatorStrategy",
    "StrategyRegistry",
    "StrategyType",
    "sma",
    "vortex",
]
