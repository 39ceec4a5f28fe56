"""
FastAPI dependencies.
"""

from functools import lru_cache

from src.core.config import SimulatorSettings
from src.core.models.trading_engine import TradingEngine


@lru_cache
def get_settings() -> SimulatorSettings:
    """Load settings once per process."""
    return SimulatorSettings()


@lru_cache
def get_engine() -> TradingEngine:
    """Process-wide engine instance, built on first use."""
    return TradingEngine.from_settings(get_settings())
