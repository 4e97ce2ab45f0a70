from decimal import Decimal
from typing import Dict, List

from pydantic import field_validator
from pydantic_settings import BaseSettings

from trading_bot.constants import (
    BINANCE_BASE_URL,
    BINANCE_STREAM_URL,
    BINANCE_TESTNET_BASE_URL,
    BINANCE_TESTNET_STREAM_URL,
)


class Settings(BaseSettings):
    # Binance API - HMAC key pair
    binance_api_key: str = ""
    binance_api_secret: str = ""
    binance_base_url: str = BINANCE_BASE_URL
    binance_stream_url: str = BINANCE_STREAM_URL
    binance_use_testnet: bool = False
    binance_recv_window_ms: int = 5000

    # Options: paper, live
    trading_mode: str = "paper"

    # Bot parameters
    bot_enabled: bool = False  # Auto-start the bot on application startup
    bot_symbols: List[str] = ["BTCEUR", "ETHEUR"]
    bot_strategy: str = "SMA"  # SMA or VORTEX
    bot_short_sma_period: int = 7
    bot_long_sma_period: int = 25
    bot_vortex_period: int = 14
    bot_sampling_interval_seconds: int = 60
    bot_order_size_fraction: Decimal = Decimal("0.10")
    bot_cooldown_seconds: int = 300
    bot_min_order_notional: Decimal = Decimal("10")
    bot_quote_asset: str = "EUR"

    # Paper trading
    paper_starting_balances: Dict[str, Decimal] = {"EUR": Decimal("1000")}
    paper_start_prices: Dict[str, Decimal] = {"BTCEUR": Decimal("60000"), "ETHEUR": Decimal("3000")}
    paper_feed_interval_seconds: float = 1.0

    log_level: str = "INFO"

    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("trading_mode")
    @classmethod
    def normalize_mode(cls, v: str) -> str:
        mode = v.strip().lower()
        if mode not in ("paper", "live"):
            raise ValueError(f"trading_mode must be 'paper' or 'live', got '{v}'")
        return mode

    @field_validator("bot_symbols")
    @classmethod
    def normalize_symbols(cls, v: List[str]) -> List[str]:
        return [s.strip().upper() for s in v if s.strip()]

    @field_validator("bot_strategy", "bot_quote_asset", "log_level")
    @classmethod
    def upper(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def rest_base_url(self) -> str:
        """REST endpoint, switched to the Spot testnet when requested"""
        if self.binance_use_testnet:
            return BINANCE_TESTNET_BASE_URL
        return self.binance_base_url

    @property
    def stream_base_url(self) -> str:
        """WebSocket stream endpoint, switched to the Spot testnet when requested"""
        if self.binance_use_testnet:
            return BINANCE_TESTNET_STREAM_URL
        return self.binance_stream_url

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
