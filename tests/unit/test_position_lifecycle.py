"""
Unit tests for PositionLifecycleManager.
Testing open/close accounting, auto-close rules and the trade history.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from src.core.enums import CloseReason, PositionType
from src.core.exceptions.trading import (
    InvalidLeverageError,
    InvalidPriceError,
    MalformedInputError,
    PositionNotFoundError,
)
from src.core.models.portfolio_ledger import PortfolioLedger
from src.core.models.position import Position
from src.core.models.position_lifecycle import PositionLifecycleManager
from src.core.models.results import CloseResult, OpenStatus

NOW = datetime(2025, 3, 1, 9, 30, tzinfo=UTC)


@pytest.fixture
def ledger() -> PortfolioLedger:
    return PortfolioLedger(initial_balance=Decimal("10000"))


@pytest.fixture
def lifecycle(ledger: PortfolioLedger) -> PositionLifecycleManager:
    return PositionLifecycleManager(ledger)


def open_position(
    lifecycle: PositionLifecycleManager,
    position_type: PositionType = PositionType.LONG,
    leverage: int = 5,
    entry_price: str = "100",
    margin: str = "500",
    asset: str = "BTCUSDT",
    target_profit: str = "100",
    target_loss: str = "-100",
    now: datetime = NOW,
) -> Position:
    result = lifecycle.open(
        asset=asset,
        position_type=position_type,
        leverage=leverage,
        entry_price=Decimal(entry_price),
        margin_amount=Decimal(margin),
        target_profit_pct=Decimal(target_profit),
        target_loss_pct=Decimal(target_loss),
        now=now,
    )
    assert result.opened
    assert result.position is not None
    return result.position


def assert_ledger_balanced(ledger: PortfolioLedger, lifecycle: PositionLifecycleManager) -> None:
    used = sum((position.margin for position in ledger.positions.values()), Decimal("0"))
    assert ledger.cash + used == ledger.initial_balance + ledger.realized_pnl
    booked = sum((trade.pnl_amount for trade in lifecycle.trade_history()), Decimal("0"))
    assert ledger.realized_pnl == booked


class TestOpen:
    """Tests for opening positions."""

    def test_should_reserve_margin_and_size_position(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test LONG 5x with 500 margin at 100."""
        position = open_position(lifecycle)

        assert position.notional_size == Decimal("2500")
        assert position.quantity == Decimal("25")
        assert ledger.cash == Decimal("9500")
        assert ledger.get_position(position.id) == position
        assert_ledger_balanced(ledger, lifecycle)

    def test_should_normalize_asset_and_direction(
        self, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test string inputs are accepted."""
        result = lifecycle.open(
            asset="ethusdt",
            position_type="short",
            leverage=2,
            entry_price="2000",
            margin_amount="100",
            target_profit_pct="10",
            target_loss_pct="-5",
            now=NOW,
        )

        assert result.position is not None
        assert result.position.asset == "ETHUSDT"
        assert result.position.position_type == PositionType.SHORT

    def test_should_skip_when_margin_exceeds_cash(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test insufficient funds leaves state unchanged."""
        result = lifecycle.open(
            asset="BTCUSDT",
            position_type=PositionType.LONG,
            leverage=5,
            entry_price=Decimal("100"),
            margin_amount=Decimal("20000"),
            target_profit_pct=Decimal("10"),
            target_loss_pct=Decimal("-10"),
            now=NOW,
        )

        assert result.status == OpenStatus.SKIPPED
        assert result.position is None
        assert result.error is not None
        assert ledger.cash == Decimal("10000")
        assert ledger.positions == {}

    def test_should_skip_dust_margin(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test margin at the minimum is not opened."""
        result = lifecycle.open(
            asset="BTCUSDT",
            position_type=PositionType.LONG,
            leverage=5,
            entry_price=Decimal("100"),
            margin_amount=Decimal("1"),
            target_profit_pct=Decimal("10"),
            target_loss_pct=Decimal("-10"),
            now=NOW,
        )

        assert result.status == OpenStatus.SKIPPED
        assert ledger.cash == Decimal("10000")

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("leverage", 0),
            ("entry_price", Decimal("0")),
            ("margin_amount", Decimal("-5")),
            ("target_profit_pct", Decimal("-1")),
            ("target_loss_pct", Decimal("3")),
            ("position_type", "SIDEWAYS"),
            ("asset", ""),
        ],
    )
    def test_should_reject_malformed_input(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager, field: str, value: object
    ) -> None:
        """Test each malformed field raises and mutates nothing."""
        kwargs = {
            "asset": "BTCUSDT",
            "position_type": PositionType.LONG,
            "leverage": 5,
            "entry_price": Decimal("100"),
            "margin_amount": Decimal("500"),
            "target_profit_pct": Decimal("10"),
            "target_loss_pct": Decimal("-10"),
            "now": NOW,
        }
        kwargs[field] = value

        with pytest.raises(MalformedInputError):
            lifecycle.open(**kwargs)

        assert ledger.cash == Decimal("10000")
        assert ledger.positions == {}

    def test_should_enforce_leverage_cap(self, ledger: PortfolioLedger) -> None:
        """Test max_leverage rejects larger leverage."""
        lifecycle = PositionLifecycleManager(ledger, max_leverage=10)

        with pytest.raises(InvalidLeverageError):
            open_position(lifecycle, leverage=11)

        assert open_position(lifecycle, leverage=10).leverage == 10


class TestClose:
    """Tests for closing positions."""

    def test_should_settle_long_win(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test LONG 5x from 100 to 110."""
        # Arrange
        position = open_position(lifecycle)

        # Act
        result = lifecycle.close(position.id, Decimal("110"), CloseReason.MANUAL, NOW)

        # Assert
        assert result.found
        trade = result.trade
        assert trade.pnl_percent == Decimal("50")
        assert trade.pnl_amount == Decimal("1250")
        assert trade.close_reason == CloseReason.MANUAL
        assert ledger.cash == Decimal("11250")
        assert ledger.realized_pnl == Decimal("1250")
        assert ledger.positions == {}
        assert_ledger_balanced(ledger, lifecycle)

    def test_should_settle_short_loss(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test SHORT 3x from 50 to 55."""
        # Arrange
        position = open_position(
            lifecycle, PositionType.SHORT, leverage=3, entry_price="50", margin="1000"
        )
        assert ledger.cash == Decimal("9000")

        # Act
        trade = lifecycle.close(position.id, Decimal("55"), CloseReason.MANUAL, NOW).trade

        # Assert
        assert trade.pnl_percent == Decimal("-30")
        assert trade.pnl_amount == Decimal("-900")
        assert ledger.cash == Decimal("9100")
        assert ledger.realized_pnl == Decimal("-900")
        assert_ledger_balanced(ledger, lifecycle)

    def test_should_report_unknown_position(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test closing an id that is not open."""
        result = lifecycle.close("missing", Decimal("100"), CloseReason.MANUAL, NOW)

        assert not result.found
        assert isinstance(result.error, PositionNotFoundError)
        assert ledger.cash == Decimal("10000")

    def test_should_not_credit_twice(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test a second close of the same id is a no-op."""
        position = open_position(lifecycle)
        lifecycle.close(position.id, Decimal("110"), CloseReason.MANUAL, NOW)

        second = lifecycle.close(position.id, Decimal("120"), CloseReason.MANUAL, NOW)

        assert not second.found
        assert ledger.cash == Decimal("11250")
        assert len(lifecycle.trade_history()) == 1

    def test_should_settle_once_under_concurrent_closes(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test racing closes of one id credit cash exactly once."""
        # Arrange
        position = open_position(lifecycle)
        workers = 16
        barrier = threading.Barrier(workers)

        def close_after_barrier() -> CloseResult:
            barrier.wait()
            return lifecycle.close(position.id, Decimal("110"), CloseReason.MANUAL, NOW)

        # Act
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(close_after_barrier) for _ in range(workers)]
            results = [future.result(timeout=10) for future in futures]

        # Assert
        assert sum(result.found for result in results) == 1
        assert ledger.cash == Decimal("11250")
        assert ledger.realized_pnl == Decimal("1250")
        assert len(lifecycle.trade_history()) == 1
        assert_ledger_balanced(ledger, lifecycle)

    def test_should_reject_invalid_close_price(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test a non-positive close price leaves the position open."""
        position = open_position(lifecycle)

        with pytest.raises(InvalidPriceError):
            lifecycle.close(position.id, Decimal("0"), CloseReason.MANUAL, NOW)

        assert position.id in ledger.positions

    def test_should_book_loss_beyond_margin(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test a loss larger than the margin is booked in full."""
        position = open_position(lifecycle, leverage=10, margin="1000")

        trade = lifecycle.close(position.id, Decimal("80"), CloseReason.MANUAL, NOW).trade

        assert trade.pnl_amount == Decimal("-2000")
        assert ledger.cash == Decimal("8000")
        assert_ledger_balanced(ledger, lifecycle)


class TestAutoClose:
    """Tests for evaluate_auto_close and evaluate_positions."""

    def test_should_take_profit_at_target(self, lifecycle: PositionLifecycleManager) -> None:
        """Test the >= boundary of the profit target."""
        position = open_position(lifecycle, target_profit="50")

        assert lifecycle.evaluate_auto_close(position, Decimal("110"), NOW) == (
            CloseReason.TAKE_PROFIT
        )
        assert lifecycle.evaluate_auto_close(position, Decimal("109.99"), NOW) is None

    def test_should_stop_loss_at_target(self, lifecycle: PositionLifecycleManager) -> None:
        """Test the <= boundary of the loss target."""
        position = open_position(lifecycle, target_loss="-25")

        assert lifecycle.evaluate_auto_close(position, Decimal("95"), NOW) == (
            CloseReason.STOP_LOSS
        )
        assert lifecycle.evaluate_auto_close(position, Decimal("95.01"), NOW) is None

    def test_should_prefer_time_limit(self, lifecycle: PositionLifecycleManager) -> None:
        """Test TIME_LIMIT wins over TAKE_PROFIT."""
        position = open_position(lifecycle, target_profit="50")

        later = NOW + timedelta(hours=24)
        assert lifecycle.evaluate_auto_close(position, Decimal("200"), later) == (
            CloseReason.TIME_LIMIT
        )
        assert lifecycle.evaluate_auto_close(
            position, Decimal("100"), later - timedelta(seconds=1)
        ) is None

    def test_should_close_triggered_positions_only(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test one pass closes only positions past a threshold."""
        winner = open_position(lifecycle, asset="BTCUSDT", target_profit="20")
        holder = open_position(lifecycle, asset="ETHUSDT", target_profit="20")

        closed = lifecycle.evaluate_positions(
            {"BTCUSDT": Decimal("105"), "ETHUSDT": Decimal("101")}, NOW
        )

        assert [trade.position_id for trade in closed] == [winner.id]
        assert closed[0].close_reason == CloseReason.TAKE_PROFIT
        assert list(ledger.positions) == [holder.id]
        assert_ledger_balanced(ledger, lifecycle)

    def test_should_leave_positions_without_price(
        self, ledger: PortfolioLedger, lifecycle: PositionLifecycleManager
    ) -> None:
        """Test a missing asset price skips the position, even when expired."""
        position = open_position(lifecycle, asset="SOLUSDT")

        closed = lifecycle.evaluate_positions(
            {"BTCUSDT": Decimal("100")}, NOW + timedelta(days=3)
        )

        assert closed == []
        assert position.id in ledger.positions


class TestTradeHistory:
    """Tests for the bounded trade history."""

    def test_should_keep_most_recent_first(self, lifecycle: PositionLifecycleManager) -> None:
        """Test trade order."""
        first = open_position(lifecycle)
        second = open_position(lifecycle)
        lifecycle.close(first.id, Decimal("101"), CloseReason.MANUAL, NOW)
        lifecycle.close(second.id, Decimal("102"), CloseReason.MANUAL, NOW)

        assert [trade.position_id for trade in lifecycle.trade_history()] == [
            second.id,
            first.id,
        ]

    def test_should_evict_oldest_trades(self, ledger: PortfolioLedger) -> None:
        """Test capacity bound."""
        lifecycle = PositionLifecycleManager(ledger, trade_capacity=3)
        ids = []
        for _ in range(5):
            position = open_position(lifecycle, margin="10")
            lifecycle.close(position.id, Decimal("100"), CloseReason.MANUAL, NOW)
            ids.append(position.id)

        history = lifecycle.trade_history()
        assert len(history) == 3
        assert [trade.position_id for trade in history] == ids[:1:-1]
