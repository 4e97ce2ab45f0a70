"""Bot control and status Pydantic schemas"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from trading_bot.strategies import StrategyType


class BotConfigRequest(BaseModel):
    """Partial configuration update; omitted fields keep their current value"""

    strategy: Optional[StrategyType] = None
    short_sma_period: Optional[int] = Field(None, ge=2)
    long_sma_period: Optional[int] = Field(None, ge=3)
    vortex_period: Optional[int] = Field(None, ge=5)
    sampling_interval_seconds: Optional[int] = Field(None, ge=10)
    order_size_fraction: Optional[Decimal] = Field(None, gt=0, le=1)
    cooldown_seconds: Optional[int] = Field(None, ge=0)
    min_order_notional: Optional[Decimal] = Field(None, gt=0)
    symbols: Optional[List[str]] = None

    @field_validator("symbols")
    @classmethod
    def normalize_symbols(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return [s.strip().upper() for s in v if s and s.strip()]


class SymbolBotStatus(BaseModel):
    symbol: str
    current_price: Optional[Decimal] = None
    fast_indicator: Optional[Decimal] = None
    slow_indicator: Optional[Decimal] = None
    signal: str  # INSUFFICIENT_DATA, BULLISH, BEARISH, NONE
    price_history_size: int
    required_data_points: int
    position_quantity: Decimal
    last_trade_time: Optional[datetime] = None
    recent_prices: List[Decimal] = []


class BotStatusResponse(BaseModel):
    running: bool
    started_at: Optional[datetime] = None
    strategy: StrategyType
    short_sma_period: int
    long_sma_period: int
    vortex_period: int
    sampling_interval_seconds: int
    order_size_fraction: Decimal
    cooldown_seconds: int
    min_order_notional: Decimal
    quote_asset: str
    symbols: Dict[str, SymbolBotStatus]
