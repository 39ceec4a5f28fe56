"""
Unit tests for PortfolioLedger.
Testing margin reservation, release and mark-to-market.
"""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from src.core.enums import PositionType
from src.core.exceptions.trading import InsufficientFundsError, MalformedInputError
from src.core.models.portfolio_ledger import PortfolioLedger
from src.core.models.position import Position


def open_on(ledger: PortfolioLedger, asset: str, position_type: PositionType, margin: str) -> Position:
    reservation = ledger.reserve_margin(Decimal(margin))
    position = Position.open(
        reservation=reservation,
        asset=asset,
        position_type=position_type,
        leverage=2,
        entry_price=Decimal("100"),
        target_profit_pct=Decimal("20"),
        target_loss_pct=Decimal("-10"),
        opened_at=datetime(2025, 1, 1, tzinfo=UTC),
    )
    ledger.add_position(position)
    return position


class TestLedgerInitialization:
    """Tests for ledger construction."""

    def test_should_default_cash_to_initial_balance(self) -> None:
        """Test default cash."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))

        assert ledger.cash == Decimal("10000")
        assert ledger.realized_pnl == Decimal("0")
        assert ledger.positions == {}

    def test_should_convert_float_inputs(self) -> None:
        """Test float normalization."""
        ledger = PortfolioLedger(initial_balance=10000.0, min_margin=0.5)  # type: ignore[arg-type]

        assert ledger.initial_balance == Decimal("10000")
        assert ledger.min_margin == Decimal("0.5")

    def test_should_reject_non_positive_initial_balance(self) -> None:
        """Test balance guard."""
        with pytest.raises(MalformedInputError):
            PortfolioLedger(initial_balance=Decimal("0"))


class TestReserveMargin:
    """Tests for reserve_margin."""

    def test_should_debit_cash(self) -> None:
        """Test successful reservation."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))

        reservation = ledger.reserve_margin(Decimal("500"))

        assert reservation.amount == Decimal("500")
        assert ledger.cash == Decimal("9500")

    def test_should_allow_reserving_all_cash(self) -> None:
        """Test the amount == cash boundary."""
        ledger = PortfolioLedger(initial_balance=Decimal("1000"))

        ledger.reserve_margin(Decimal("1000"))

        assert ledger.cash == Decimal("0")

    def test_should_reject_amount_above_cash_without_mutation(self) -> None:
        """Test insufficient funds."""
        ledger = PortfolioLedger(initial_balance=Decimal("1000"))

        with pytest.raises(InsufficientFundsError) as exc_info:
            ledger.reserve_margin(Decimal("1000.01"))

        assert exc_info.value.required == Decimal("1000.01")
        assert exc_info.value.available == Decimal("1000")
        assert ledger.cash == Decimal("1000")

    def test_should_reject_dust_amounts(self) -> None:
        """Test the minimum margin floor."""
        ledger = PortfolioLedger(initial_balance=Decimal("1000"), min_margin=Decimal("5"))

        with pytest.raises(InsufficientFundsError):
            ledger.reserve_margin(Decimal("5"))
        with pytest.raises(InsufficientFundsError):
            ledger.reserve_margin(Decimal("0.01"))

        assert ledger.cash == Decimal("1000")


class TestReleaseMargin:
    """Tests for release_margin."""

    def test_should_credit_margin_and_pnl(self) -> None:
        """Test cash and realized PnL after a winning close."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        ledger.reserve_margin(Decimal("500"))

        ledger.release_margin(Decimal("500"), Decimal("1250"))

        assert ledger.cash == Decimal("11250")
        assert ledger.realized_pnl == Decimal("1250")

    @patch("src.core.models.portfolio_ledger.logger")
    def test_should_allow_negative_cash_and_warn(self, mock_logger: Mock) -> None:
        """Test losses beyond margin are booked, not blocked."""
        ledger = PortfolioLedger(initial_balance=Decimal("1000"))
        ledger.reserve_margin(Decimal("1000"))

        ledger.release_margin(Decimal("1000"), Decimal("-1500"))

        assert ledger.cash == Decimal("-500")
        assert ledger.realized_pnl == Decimal("-1500")
        assert mock_logger.warning.call_count == 1


class TestMarkToMarket:
    """Tests for mark_to_market and valuation."""

    def test_should_sum_unrealized_pnl(self) -> None:
        """Test long and short contributions."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        open_on(ledger, "BTCUSDT", PositionType.LONG, "1000")
        open_on(ledger, "ETHUSDT", PositionType.SHORT, "1000")

        # LONG +20% on 2000 notional = +400; SHORT -10% on 2000 notional = -200
        pnl = ledger.mark_to_market({"BTCUSDT": Decimal("110"), "ETHUSDT": Decimal("105")})

        assert pnl == Decimal("200")

    def test_should_skip_positions_without_price(self) -> None:
        """Test missing assets contribute zero."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        open_on(ledger, "BTCUSDT", PositionType.LONG, "1000")
        open_on(ledger, "ETHUSDT", PositionType.LONG, "1000")

        pnl = ledger.mark_to_market({"BTCUSDT": Decimal("110")})

        assert pnl == Decimal("400")
        assert len(ledger.positions) == 2

    def test_should_value_portfolio_with_reserved_margin(self) -> None:
        """Test total value = cash + margin + unrealized."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        open_on(ledger, "BTCUSDT", PositionType.LONG, "1000")

        assert ledger.total_value({}) == Decimal("10000")
        assert ledger.total_value({"BTCUSDT": Decimal("110")}) == Decimal("10400")

    def test_should_snapshot_state(self) -> None:
        """Test snapshot contents."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        position = open_on(ledger, "BTCUSDT", PositionType.LONG, "1000")

        snapshot = ledger.snapshot({"BTCUSDT": Decimal("90")})

        assert snapshot.cash == Decimal("9000")
        assert snapshot.used_margin == Decimal("1000")
        assert snapshot.unrealized_pnl == Decimal("-400")
        assert snapshot.total_value == Decimal("9600")
        assert snapshot.positions == (position,)
        assert snapshot.to_dict()["total_value"] == 9600.0


class TestPositionSet:
    """Tests for adding and removing positions."""

    def test_should_keep_open_order(self) -> None:
        """Test insertion order."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        first = open_on(ledger, "BTCUSDT", PositionType.LONG, "100")
        second = open_on(ledger, "ETHUSDT", PositionType.LONG, "100")

        assert ledger.open_positions() == (first, second)

    def test_should_remove_position_once(self) -> None:
        """Test atomic check-and-remove."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        position = open_on(ledger, "BTCUSDT", PositionType.LONG, "100")

        assert ledger.remove_position(position.id) == position
        assert ledger.remove_position(position.id) is None

    def test_should_reject_duplicate_ids(self) -> None:
        """Test id uniqueness in the ledger."""
        ledger = PortfolioLedger(initial_balance=Decimal("10000"))
        position = open_on(ledger, "BTCUSDT", PositionType.LONG, "100")

        with pytest.raises(MalformedInputError, match="Duplicate"):
            ledger.add_position(position)
