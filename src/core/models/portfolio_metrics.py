"""
Portfolio metrics and calculations.

This module summarizes the trade history and performance series with pandas.
"""

from collections.abc import Iterable

import pandas as pd

from src.core.interfaces.data import IMetricsCalculator

from .portfolio_performance import PerformanceSample
from .trade import Trade


def trades_to_frame(trades: Iterable[Trade]) -> pd.DataFrame:
    """Build a trade DataFrame ordered by close time."""
    frame = pd.DataFrame([trade.to_dict() for trade in trades])
    if frame.empty:
        return frame
    frame["closed_at"] = pd.to_datetime(frame["closed_at"])
    return frame.sort_values("closed_at").reset_index(drop=True)


def performance_to_frame(samples: Iterable[PerformanceSample]) -> pd.DataFrame:
    """Build a performance DataFrame ordered by sample time."""
    frame = pd.DataFrame([sample.to_dict() for sample in samples])
    if frame.empty:
        return frame
    frame["timestamp"] = pd.to_datetime(frame["timestamp"])
    return frame.sort_values("timestamp").reset_index(drop=True)


class PortfolioMetrics(IMetricsCalculator):
    """Trade and performance statistics.

    Works on the bounded histories, so statistics cover only the retained
    window, not the whole session.
    """

    def calculate_returns(self, performance_history: pd.DataFrame) -> dict[str, float]:
        """Calculate return metrics from a performance series.

        Args:
            performance_history: Frame with ``performance_pct`` and ``total_value``

        Returns:
            Latest, best and worst performance plus max drawdown, all in percent
        """
        if performance_history.empty:
            return {
                "latest_performance_pct": 0.0,
                "best_performance_pct": 0.0,
                "worst_performance_pct": 0.0,
                "max_drawdown_pct": 0.0,
            }

        values = performance_history["total_value"].astype(float)
        running_peak = values.cummax()
        # Drawdown is undefined until the portfolio has had a positive value
        positive_peak = running_peak.where(running_peak > 0)
        drawdown = ((values - positive_peak) / positive_peak * 100.0).fillna(0.0)

        performance = performance_history["performance_pct"].astype(float)
        return {
            "latest_performance_pct": float(performance.iloc[-1]),
            "best_performance_pct": float(performance.max()),
            "worst_performance_pct": float(performance.min()),
            "max_drawdown_pct": float(-drawdown.min()),
        }

    def calculate_trade_metrics(self, trades: pd.DataFrame) -> dict[str, float]:
        """Calculate trade statistics.

        Args:
            trades: Frame with ``pnl_amount``, ``pnl_percent`` and ``close_reason``

        Returns:
            Counts, win rate, PnL totals and per-reason counts
        """
        if trades.empty:
            return {
                "total_trades": 0,
                "winning_trades": 0,
                "losing_trades": 0,
                "win_rate": 0.0,
                "total_pnl": 0.0,
                "average_pnl_pct": 0.0,
                "best_trade_pnl": 0.0,
                "worst_trade_pnl": 0.0,
            }

        pnl = trades["pnl_amount"].astype(float)
        winning = int((pnl > 0).sum())
        losing = int((pnl < 0).sum())
        metrics: dict[str, float] = {
            "total_trades": len(trades),
            "winning_trades": winning,
            "losing_trades": losing,
            "win_rate": winning / len(trades) * 100.0,
            "total_pnl": float(pnl.sum()),
            "average_pnl_pct": float(trades["pnl_percent"].astype(float).mean()),
            "best_trade_pnl": float(pnl.max()),
            "worst_trade_pnl": float(pnl.min()),
        }

        for reason, count in trades["close_reason"].value_counts().items():
            metrics[f"closed_{str(reason).lower()}"] = int(count)

        return metrics
