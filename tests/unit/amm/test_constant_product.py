"""Tests for ConstantProductPool state transitions."""

import pytest
from structlog.testing import capture_logs

from cfmm.amm.constant_product import ConstantProductPool
from cfmm.amm.errors import AmmError, EmptyPoolError, InvalidWithdrawal
from cfmm.config import PoolConfig
from cfmm.safe_int import DivideByZero, Overflow, Underflow
from cfmm.types import Liquidity, Percentage, Price, TokenAmount
from tests.helpers import make_pool


def state(pool: ConstantProductPool) -> tuple[int, int, int]:
    return pool.get_x().value, pool.get_y().value, pool.get_l().value


class TestConstruction:
    """Tests for creating pools."""

    def test_new_is_empty(self, one_percent):
        pool = ConstantProductPool.new(one_percent)
        assert state(pool) == (0, 0, 0)
        assert pool.is_empty
        assert pool.fee == Percentage(10_000)

    def test_fee_is_not_range_checked(self):
        pool = ConstantProductPool(Percentage(2_000_000))
        assert pool.fee == Percentage(2_000_000)

    def test_fee_must_be_percentage(self):
        with pytest.raises(TypeError):
            ConstantProductPool(10_000)  # type: ignore[arg-type]

    def test_fee_is_read_only(self, empty_pool):
        with pytest.raises(AttributeError):
            empty_pool.fee = Percentage(0)  # type: ignore[misc]

    def test_from_config(self):
        pool = ConstantProductPool.from_config(PoolConfig(fee=Percentage(500)))
        assert pool.fee == Percentage(500)
        assert pool.is_empty


class TestAddLiquidity:
    """Tests for add_liquidity."""

    def test_bootstrap_scenario(self, empty_pool):
        """1% fee, first deposit of 5: x = y = 5, l = 25.00, price = 1."""
        minted = empty_pool.add_liquidity(TokenAmount(5))

        assert empty_pool.get_x() == TokenAmount(5)
        assert empty_pool.get_y() == TokenAmount(5)
        assert empty_pool.get_l() == Liquidity.from_integer(25)
        assert empty_pool.get_l() == Liquidity(2500)
        assert minted == Liquidity(2500)
        assert empty_pool.get_price() == Price.from_integer(1)
        assert not empty_pool.is_empty

    def test_bootstrap_seeds_raw_product(self, empty_pool):
        """Supply is x * y, not the geometric mean."""
        assert empty_pool.add_liquidity(TokenAmount(100)) == Liquidity.from_integer(10_000)

    def test_subsequent_deposit(self, feeless_pool):
        minted = feeless_pool.add_liquidity(TokenAmount(10))

        assert state(feeless_pool) == (110, 110, 1_210_000)
        assert minted == Liquidity(121_000)

    def test_subsequent_deposit_keeps_price(self):
        pool = make_pool(x=1000, y=3000)
        pool.add_liquidity(TokenAmount(250))

        assert pool.get_x() == TokenAmount(1250)
        assert pool.get_y() == TokenAmount(3750)
        assert pool.get_price() == Price.from_integer(3)

    def test_zero_deposit_into_empty_pool_stays_empty(self, empty_pool):
        assert empty_pool.add_liquidity(TokenAmount(0)) == Liquidity(0)
        assert empty_pool.is_empty

    def test_zero_deposit_into_active_pool_is_noop(self, feeless_pool):
        assert feeless_pool.add_liquidity(TokenAmount(0)) == Liquidity(0)
        assert state(feeless_pool) == (100, 100, 1_000_000)

    def test_rejects_non_token_amount(self, empty_pool):
        with pytest.raises(TypeError):
            empty_pool.add_liquidity(5)  # type: ignore[arg-type]

    def test_overflow_leaves_state_unchanged(self):
        pool = make_pool(x=1, y=1)
        with pytest.raises(Overflow):
            pool.add_liquidity(TokenAmount(2**127))
        assert state(pool) == (1, 1, 100)

    def test_quote_does_not_mutate(self, feeless_pool):
        change = feeless_pool.quote_add_liquidity(TokenAmount(10))
        assert change.x == TokenAmount(110)
        assert change.delta_l == Liquidity(121_000)
        assert state(feeless_pool) == (100, 100, 1_000_000)


class TestRemoveLiquidity:
    """Tests for remove_liquidity."""

    def test_withdrawal(self, feeless_pool):
        burned = feeless_pool.remove_liquidity(TokenAmount(10))

        assert state(feeless_pool) == (90, 90, 810_000)
        assert burned == Liquidity(100_000)
        assert feeless_pool.get_price() == Price.from_integer(1)

    def test_empty_pool_raises_divide_by_zero(self, empty_pool):
        with pytest.raises(DivideByZero):
            empty_pool.remove_liquidity(TokenAmount(1))

    @pytest.mark.parametrize("delta", [100, 101, 2**100])
    def test_whole_reserve_or_more_is_invalid(self, feeless_pool, delta):
        with pytest.raises(InvalidWithdrawal):
            feeless_pool.remove_liquidity(TokenAmount(delta))
        assert state(feeless_pool) == (100, 100, 1_000_000)

    def test_zero_withdrawal_is_invalid(self, feeless_pool):
        with pytest.raises(InvalidWithdrawal):
            feeless_pool.remove_liquidity(TokenAmount(0))

    def test_withdrawal_below_ratio_resolution_is_invalid(self):
        pool = make_pool(x=2 * 10**9, y=2 * 10**9)
        with pytest.raises(InvalidWithdrawal, match="resolution"):
            pool.remove_liquidity(TokenAmount(1))
        assert pool.get_x() == TokenAmount(2 * 10**9)

    def test_withdrawal_draining_y_is_invalid(self):
        pool = make_pool(x=1000, y=1, l=100)
        with pytest.raises(InvalidWithdrawal, match="drain"):
            pool.remove_liquidity(TokenAmount(600))
        assert state(pool) == (1000, 1, 100)

    def test_withdrawal_below_liquidity_resolution_is_invalid(self):
        """A withdrawal that would not shrink the supply is rejected."""
        pool = make_pool(x=10, y=10, l=1)
        with capture_logs() as logs, pytest.raises(InvalidWithdrawal, match="Liquidity resolution"):
            pool.remove_liquidity(TokenAmount(1))
        assert state(pool) == (10, 10, 1)
        assert logs[0]["reason"] == "below_liquidity_resolution"

    def test_rejection_is_logged(self, feeless_pool):
        with capture_logs() as logs, pytest.raises(InvalidWithdrawal):
            feeless_pool.remove_liquidity(TokenAmount(100))
        assert logs[0]["event"] == "remove_liquidity_rejected"
        assert logs[0]["reason"] == "exceeds_reserve"
        assert logs[0]["log_level"] == "warning"


class TestSwap:
    """Tests for swap."""

    def test_feeless_swap_x_in(self, feeless_pool):
        """(100, 100), no fee, 50 X in: payout floor(50 * 100 / 150) = 33."""
        assert feeless_pool.swap(TokenAmount(50), in_x=True) is None

        assert feeless_pool.get_x() == TokenAmount(150)
        assert feeless_pool.get_y() == TokenAmount(67)
        assert feeless_pool.get_price() == Price(446_666_666_666_666_666_666_666)
        assert feeless_pool.get_price().value == 67 * 10**24 // 150

    def test_feeless_swap_y_in(self, feeless_pool):
        feeless_pool.swap(TokenAmount(50), in_x=False)

        assert feeless_pool.get_x() == TokenAmount(67)
        assert feeless_pool.get_y() == TokenAmount(150)
        assert feeless_pool.get_price() == Price(2_238_805_970_149_253_731_343_283)
        assert feeless_pool.get_price() > Price.one()

    def test_swap_does_not_change_liquidity(self, feeless_pool):
        feeless_pool.swap(TokenAmount(50), in_x=True)
        assert feeless_pool.get_l() == Liquidity(1_000_000)

    def test_fee_reduces_payout(self):
        pool = make_pool(x=1000, y=1000, fee_raw=3_000)
        result = pool.quote_swap(TokenAmount(100), in_x=True)

        # ceil(100 * 0.997) = 100; floor(100 * 1000 / 1100) = 90
        assert result.effective_in == TokenAmount(100)
        assert result.amount_out == TokenAmount(90)

        pool = make_pool(x=1000, y=1000, fee_raw=30_000)
        result = pool.quote_swap(TokenAmount(100), in_x=True)

        # ceil(100 * 0.97) = 97; floor(97 * 1000 / 1100) = 88
        assert result.effective_in == TokenAmount(97)
        assert result.amount_out == TokenAmount(88)

    def test_quote_swap_does_not_mutate(self, feeless_pool):
        result = feeless_pool.quote_swap(TokenAmount(50), in_x=True)
        assert (result.reserve_x, result.reserve_y) == (TokenAmount(150), TokenAmount(67))
        assert state(feeless_pool) == (100, 100, 1_000_000)

    def test_zero_swap_is_noop(self, feeless_pool):
        feeless_pool.swap(TokenAmount(0), in_x=True)
        assert state(feeless_pool) == (100, 100, 1_000_000)

    def test_empty_pool_raises(self, empty_pool):
        with pytest.raises(EmptyPoolError):
            empty_pool.swap(TokenAmount(10), in_x=True)
        assert empty_pool.is_empty

    def test_reserve_overflow_leaves_state_unchanged(self):
        pool = make_pool(x=2**128 - 1, y=10, l=1)
        with pytest.raises(Overflow):
            pool.swap(TokenAmount(1), in_x=True)
        assert state(pool) == (2**128 - 1, 10, 1)

    def test_fee_above_one_underflows(self):
        pool = make_pool(x=100, y=100, fee_raw=2_000_000)
        with pytest.raises(Underflow):
            pool.swap(TokenAmount(10), in_x=True)
        assert state(pool) == (100, 100, 1_000_000)

    def test_swap_is_logged(self, feeless_pool):
        with capture_logs() as logs:
            feeless_pool.swap(TokenAmount(50), in_x=True)
        assert logs == [
            {
                "event": "swap",
                "log_level": "debug",
                "in_x": True,
                "amount_in": 50,
                "effective_in": 50,
                "amount_out": 33,
                "x": 150,
                "y": 67,
            }
        ]


class TestGetPrice:
    """Tests for get_price."""

    def test_empty_pool_raises_divide_by_zero(self, empty_pool):
        with pytest.raises(DivideByZero):
            empty_pool.get_price()

    def test_price_is_y_over_x(self):
        assert make_pool(x=1000, y=3000).get_price() == Price.from_integer(3)
        assert make_pool(x=4, y=1).get_price() == Price.from_str("0.25")


class TestErrors:
    """Error hierarchy."""

    def test_pool_errors(self):
        assert issubclass(InvalidWithdrawal, AmmError)
        assert issubclass(EmptyPoolError, AmmError)


class TestRejectionLogging:
    """Every rejected operation leaves a warning naming the reason."""

    @pytest.mark.parametrize(
        ("build", "operation", "error", "event", "reason"),
        [
            (
                lambda: make_pool(x=1, y=1),
                lambda pool: pool.add_liquidity(TokenAmount(2**127)),
                Overflow,
                "add_liquidity_rejected",
                "overflow",
            ),
            (
                lambda: make_pool(x=2**128 - 1, y=10, l=1),
                lambda pool: pool.swap(TokenAmount(1), in_x=True),
                Overflow,
                "swap_rejected",
                "overflow",
            ),
            (
                lambda: make_pool(fee_raw=2_000_000),
                lambda pool: pool.swap(TokenAmount(10), in_x=True),
                Underflow,
                "swap_rejected",
                "underflow",
            ),
            (
                lambda: make_pool(x=0, y=0, l=0),
                lambda pool: pool.remove_liquidity(TokenAmount(1)),
                DivideByZero,
                "remove_liquidity_rejected",
                "divide_by_zero",
            ),
            (
                lambda: make_pool(x=0, y=0, l=0),
                lambda pool: pool.get_price(),
                DivideByZero,
                "get_price_rejected",
                "divide_by_zero",
            ),
            (
                lambda: make_pool(x=10, y=10, l=1),
                lambda pool: pool.remove_liquidity(TokenAmount(1)),
                InvalidWithdrawal,
                "remove_liquidity_rejected",
                "below_liquidity_resolution",
            ),
        ],
        ids=[
            "add-overflow",
            "swap-overflow",
            "swap-fee-underflow",
            "remove-empty",
            "price-empty",
            "remove-below-liquidity-resolution",
        ],
    )
    def test_rejection_logs_warning(self, build, operation, error, event, reason):
        pool = build()
        before = state(pool)
        with capture_logs() as logs, pytest.raises(error):
            operation(pool)
        assert state(pool) == before
        assert len(logs) == 1
        assert logs[0]["event"] == event
        assert logs[0]["reason"] == reason
        assert logs[0]["log_level"] == "warning"
