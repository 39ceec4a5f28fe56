"""
Core constants and limits.

Defines simulator-wide defaults and history capacities. Every value here can be
overridden through SimulatorSettings.
"""

# Portfolio
DEFAULT_INITIAL_BALANCE = 10000.0  # Starting virtual cash
MIN_MARGIN_AMOUNT = 1.0  # Reservations at or below this are rejected as dust

# History capacities
MAX_TRADES_HISTORY = 100  # Closed trades kept, most recent first
MAX_PRICE_HISTORY = 50  # Price points kept per asset
MAX_PERFORMANCE_HISTORY = 50  # Samples kept under the rolling policy
MAX_PERFORMANCE_DAYS = 30  # Days kept under the daily policy

# Position lifecycle
POSITION_TIME_LIMIT_HOURS = 24.0  # Positions older than this are closed
MIN_LEVERAGE = 1

# Random strategy defaults
STRATEGY_MAX_OPEN_POSITIONS = 3
STRATEGY_TRIGGER_PROBABILITY = 0.3
STRATEGY_MIN_LEVERAGE = 1
STRATEGY_MAX_LEVERAGE = 10
STRATEGY_MIN_TARGET_PROFIT = 5.0  # Percent
STRATEGY_MAX_TARGET_PROFIT = 20.0
STRATEGY_MIN_TARGET_LOSS = 5.0  # Percent, negated when applied
STRATEGY_MAX_TARGET_LOSS = 15.0
STRATEGY_MIN_TARGET_PCT = 0.01  # Targets are drawn at 2-decimal precision
STRATEGY_MARGIN_FRACTION = 0.1  # Fraction of current cash per position

# Price feed
BINANCE_TICKER_URL = "https://api.binance.com/api/v3/ticker/price"
DEFAULT_PRICE_SYMBOLS = ("BTCUSDT", "ETHUSDT", "SOLUSDT", "BNBUSDT", "XRPUSDT")
PRICE_FEED_TIMEOUT_SECONDS = 10.0
PRICE_FEED_MAX_RETRIES = 3
