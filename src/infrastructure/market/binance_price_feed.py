"""
Binance Price Feed

Fetches the latest spot prices for a set of symbols from the public Binance
ticker endpoint. This is the market feed boundary: zero, negative and
malformed quotes are dropped here before they reach the engine.

URL Pattern: https://api.binance.com/api/v3/ticker/price?symbols=["BTCUSDT","ETHUSDT"]
"""

import json
from decimal import Decimal

import requests
from loguru import logger

from src.core.config import PriceFeedSettings
from src.core.exceptions.trading import DataError, InvalidPriceError
from src.core.interfaces.data import IPriceSource
from src.core.utils.validation import validate_price


class BinancePriceFeed(IPriceSource):
    """Polls Binance ticker prices."""

    def __init__(
        self,
        settings: PriceFeedSettings | None = None,
        session: requests.Session | None = None,
    ):
        self.settings = settings or PriceFeedSettings()
        self.symbols = [symbol.upper() for symbol in self.settings.symbols]
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def build_params(self) -> dict[str, str]:
        """Build the query string for the configured symbols."""
        return {"symbols": json.dumps(self.symbols, separators=(",", ":"))}

    def fetch_prices(self) -> dict[str, Decimal]:
        """Fetch prices with retry logic.

        Returns:
            Positive prices keyed by symbol

        Raises:
            DataError: If every attempt fails
        """
        max_retries = self.settings.max_retries
        for attempt in range(max_retries):
            try:
                logger.debug(f"Fetching prices (attempt {attempt + 1}/{max_retries})")

                response = self.session.get(
                    self.settings.url,
                    params=self.build_params(),
                    timeout=self.settings.timeout_seconds,
                )
                response.raise_for_status()
                return self.parse_tickers(response.json())

            except (requests.exceptions.RequestException, ValueError) as e:
                logger.warning(f"Price fetch attempt {attempt + 1} failed: {e}")

        logger.error(f"Failed to fetch prices after {max_retries} attempts")
        raise DataError(f"Price feed unavailable after {max_retries} attempts")

    def parse_tickers(self, payload: object) -> dict[str, Decimal]:
        """Convert a ticker payload into validated prices.

        Raises:
            DataError: If the payload is not a list of tickers
        """
        if not isinstance(payload, list):
            raise DataError(f"Unexpected ticker payload: {type(payload).__name__}")

        prices: dict[str, Decimal] = {}
        for ticker in payload:
            if not isinstance(ticker, dict) or "symbol" not in ticker or "price" not in ticker:
                logger.warning(f"Skipping malformed ticker: {ticker!r}")
                continue
            symbol = str(ticker["symbol"]).upper()
            try:
                prices[symbol] = validate_price(symbol, str(ticker["price"]))
            except InvalidPriceError as e:
                logger.warning(f"Dropping quote: {e}")

        missing = set(self.symbols) - set(prices)
        if missing:
            logger.warning(f"No usable price for: {', '.join(sorted(missing))}")

        return prices
