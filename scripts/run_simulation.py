#!/usr/bin/env python3
"""
Autonomous Simulation Runner

Polls live prices from Binance and feeds them to a trading engine with the
random strategy enabled, logging the portfolio after every tick.

Example:
    python scripts/run_simulation.py --ticks 120 --interval 30 --seed 7
"""

import argparse
import time

from loguru import logger

from src.core.config import SimulatorSettings
from src.core.exceptions.trading import DataError
from src.core.models.trading_engine import TradingEngine
from src.core.types.financial import round_percentage
from src.core.utils.log_config import configure_logging
from src.infrastructure.market import BinancePriceFeed


class SimulationRunner:
    """Runs the price polling loop against one engine."""

    def __init__(self, engine: TradingEngine, feed: BinancePriceFeed, interval: float):
        self.engine = engine
        self.feed = feed
        self.interval = interval

    def run_tick(self, tick: int) -> bool:
        """Fetch prices and apply them. Returns False if the feed was unavailable."""
        try:
            prices = self.feed.fetch_prices()
        except DataError as e:
            logger.error(f"Tick {tick}: skipped, {e}")
            return False

        result = self.engine.apply_price_tick(prices)
        portfolio = result.state.portfolio

        if result.opened is not None and result.opened.position is not None:
            position = result.opened.position
            logger.info(
                f"Tick {tick}: opened {position.position_type.value} {position.asset} "
                f"x{position.leverage}"
            )
        for trade in result.closed:
            logger.info(
                f"Tick {tick}: closed {trade.asset} ({trade.close_reason.value}) "
                f"pnl={trade.pnl_amount}"
            )

        performance = result.state.performance_history[-1].performance_pct
        logger.success(
            f"Tick {tick}: cash={portfolio.cash:.2f} open={len(portfolio.positions)} "
            f"value={portfolio.total_value:.2f} performance={round_percentage(performance)}%"
        )
        return True

    def run(self, ticks: int) -> int:
        """Run the loop. Returns the number of ticks applied."""
        applied = 0
        for tick in range(1, ticks + 1):
            if self.run_tick(tick):
                applied += 1
            if tick < ticks:
                time.sleep(self.interval)
        return applied


def main():
    parser = argparse.ArgumentParser(description="Run the leveraged trading simulator on live prices")
    parser.add_argument("--ticks", type=int, default=60, help="Number of price ticks to run")
    parser.add_argument("--interval", type=float, default=10.0, help="Seconds between ticks")
    parser.add_argument("--seed", type=int, help="Seed for the random strategy")
    parser.add_argument(
        "--symbols", nargs="+", help="Symbols to track (e.g., BTCUSDT ETHUSDT)"
    )
    parser.add_argument(
        "--no-strategy", action="store_true", help="Only track prices, never open positions"
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")

    args = parser.parse_args()

    settings = SimulatorSettings()
    settings.strategy.enabled = not args.no_strategy
    if args.seed is not None:
        settings.strategy.seed = args.seed
    if args.symbols:
        settings.price_feed.symbols = args.symbols

    configure_logging(args.log_level or settings.log_level, settings.log_file)

    engine = TradingEngine.from_settings(settings)
    runner = SimulationRunner(engine, BinancePriceFeed(settings.price_feed), args.interval)

    try:
        applied = runner.run(args.ticks)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        applied = None

    state = engine.get_state()
    metrics = engine.get_metrics()
    logger.info(
        f"Finished: ticks applied={applied}, trades={len(state.trades)}, "
        f"realized={state.portfolio.realized_pnl}, "
        f"win rate={metrics['trades']['win_rate']:.1f}%"
    )


if __name__ == "__main__":
    main()
