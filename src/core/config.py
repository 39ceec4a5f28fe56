"""
Simulator configuration using Pydantic Settings.

Values come from SIM_* environment variables or a .env file, falling back to
the defaults in src.core.constants.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core import constants
from src.core.enums import PerformanceRetention


class StrategySettings(BaseSettings):
    """Random strategy driver configuration."""

    enabled: bool = Field(default=False, description="Run the random strategy on each tick")
    seed: int | None = Field(default=None, description="Seed for reproducible runs")
    trigger_probability: float = Field(
        default=constants.STRATEGY_TRIGGER_PROBABILITY, ge=0.0, le=1.0
    )
    max_open_positions: int = Field(default=constants.STRATEGY_MAX_OPEN_POSITIONS, ge=1)
    min_leverage: int = Field(default=constants.STRATEGY_MIN_LEVERAGE, ge=1)
    max_leverage: int = Field(default=constants.STRATEGY_MAX_LEVERAGE, ge=1)
    min_target_profit: float = Field(
        default=constants.STRATEGY_MIN_TARGET_PROFIT, ge=constants.STRATEGY_MIN_TARGET_PCT
    )
    max_target_profit: float = Field(
        default=constants.STRATEGY_MAX_TARGET_PROFIT, ge=constants.STRATEGY_MIN_TARGET_PCT
    )
    min_target_loss: float = Field(
        default=constants.STRATEGY_MIN_TARGET_LOSS, ge=constants.STRATEGY_MIN_TARGET_PCT
    )
    max_target_loss: float = Field(
        default=constants.STRATEGY_MAX_TARGET_LOSS, ge=constants.STRATEGY_MIN_TARGET_PCT
    )
    margin_fraction: float = Field(default=constants.STRATEGY_MARGIN_FRACTION, gt=0.0, le=1.0)

    model_config = SettingsConfigDict(env_prefix="SIM_STRATEGY_")

    @model_validator(mode="after")
    def validate_ranges(self) -> "StrategySettings":
        """Ensure every min/max pair is ordered."""
        for name in ("leverage", "target_profit", "target_loss"):
            low = getattr(self, f"min_{name}")
            high = getattr(self, f"max_{name}")
            if low > high:
                raise ValueError(f"min_{name} ({low}) must not exceed max_{name} ({high})")
        return self


class PriceFeedSettings(BaseSettings):
    """Market price source configuration."""

    url: str = Field(default=constants.BINANCE_TICKER_URL, description="Ticker endpoint")
    symbols: list[str] = Field(default=list(constants.DEFAULT_PRICE_SYMBOLS))
    timeout_seconds: float = Field(default=constants.PRICE_FEED_TIMEOUT_SECONDS, gt=0)
    max_retries: int = Field(default=constants.PRICE_FEED_MAX_RETRIES, ge=1)

    model_config = SettingsConfigDict(env_prefix="SIM_FEED_")


class SimulatorSettings(BaseSettings):
    """Main simulator settings."""

    app_name: str = Field(default="Leveraged Trading Simulator", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")

    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str | None = Field(default=None, description="Optional log file path")

    # Portfolio and lifecycle
    initial_balance: float = Field(default=constants.DEFAULT_INITIAL_BALANCE, gt=0)
    min_margin: float = Field(default=constants.MIN_MARGIN_AMOUNT, ge=0)
    max_leverage: int | None = Field(default=None, ge=1, description="Leverage cap, none if unset")
    position_time_limit_hours: float = Field(default=constants.POSITION_TIME_LIMIT_HOURS, gt=0)

    # Histories
    performance_retention: PerformanceRetention = Field(default=PerformanceRetention.ROLLING)
    max_trades_history: int = Field(default=constants.MAX_TRADES_HISTORY, ge=1)
    max_price_history: int = Field(default=constants.MAX_PRICE_HISTORY, ge=1)
    max_performance_history: int = Field(default=constants.MAX_PERFORMANCE_HISTORY, ge=1)
    max_performance_days: int = Field(default=constants.MAX_PERFORMANCE_DAYS, ge=1)

    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"], description="CORS origins"
    )

    # Sub-configurations
    strategy: StrategySettings = Field(default_factory=StrategySettings)
    price_feed: PriceFeedSettings = Field(default_factory=PriceFeedSettings)

    model_config = SettingsConfigDict(
        env_prefix="SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )
