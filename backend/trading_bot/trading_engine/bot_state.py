"""
Engine configuration snapshot and per-symbol state

EngineConfig is frozen: an update builds a new snapshot with
dataclasses.replace() and the bot swaps its reference under its lock, so a
tick always reads one consistent configuration.

SymbolState holds everything the bot remembers about one symbol between
ticks (besides the price history). Reads from outside the tick path go
through snapshot(), never the live object.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from trading_bot.exceptions import InvalidConfigurationError
from trading_bot.strategies import IndicatorPair, IndicatorStrategy, StrategyRegistry, StrategyType


@dataclass(frozen=True)
class EngineConfig:
    strategy: StrategyType
    sma_short_period: int
    sma_long_period: int
    vortex_period: int
    sampling_interval_seconds: int
    order_size_fraction: Decimal
    cooldown_seconds: int
    min_order_notional: Decimal
    quote_asset: str
    symbols: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.sma_short_period <= 0 or self.sma_long_period <= 0:
            raise InvalidConfigurationError("SMA periods must be positive")
        if self.sma_short_period >= self.sma_long_period:
            raise InvalidConfigurationError(
                f"shortSmaPeriod ({self.sma_short_period}) must be less than "
                f"longSmaPeriod ({self.sma_long_period})"
            )
        if self.vortex_period <= 0:
            raise InvalidConfigurationError("vortexPeriod must be positive")
        if self.sampling_interval_seconds <= 0:
            raise InvalidConfigurationError("samplingIntervalSeconds must be positive")
        if not (Decimal("0") < self.order_size_fraction <= Decimal("1")):
            raise InvalidConfigurationError(
                f"orderSizeFraction must be in (0, 1], got {self.order_size_fraction}"
            )
        if self.cooldown_seconds < 0:
            raise InvalidConfigurationError("cooldownSeconds must not be negative")
        if self.min_order_notional < 0:
            raise InvalidConfigurationError("minOrderNotional must not be negative")
        if not self.quote_asset:
            raise InvalidConfigurationError("quoteAsset is required")
        if not self.symbols:
            raise InvalidConfigurationError("At least one symbol is required")

    @classmethod
    def from_settings(cls, settings) -> "EngineConfig":
        """Initial snapshot from application settings."""
        try:
            strategy = StrategyType(settings.bot_strategy)
        except ValueError:
            raise InvalidConfigurationError(f"Unknown strategy: {settings.bot_strategy}")

        return cls(
            strategy=strategy,
            sma_short_period=settings.bot_short_sma_period,
            sma_long_period=settings.bot_long_sma_period,
            vortex_period=settings.bot_vortex_period,
            sampling_interval_seconds=settings.bot_sampling_interval_seconds,
            order_size_fraction=Decimal(str(settings.bot_order_size_fraction)),
            cooldown_seconds=settings.bot_cooldown_seconds,
            min_order_notional=Decimal(str(settings.bot_min_order_notional)),
            quote_asset=settings.bot_quote_asset.upper(),
            symbols=tuple(s.upper() for s in settings.bot_symbols),
        )

    def build_strategy(self) -> IndicatorStrategy:
        return StrategyRegistry.build(self.strategy, self)


@dataclass
class SymbolState:
    """Mutable per-symbol bookkeeping, owned by the trading bot."""

    symbol: str
    previous_indicators: Optional[IndicatorPair] = None
    net_position: Decimal = Decimal("0")
    last_trade_time: Optional[datetime] = None

    def snapshot(self) -> "SymbolState":
        # All fields are immutable values, a shallow copy is a full copy
        return replace(self)
