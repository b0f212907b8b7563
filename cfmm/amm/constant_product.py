"""Two-asset constant product pool.

The pool holds a reserve of token X, a reserve of token Y and the issued
liquidity supply, and charges a fixed fee on swap inputs. Every value is a
fixed-point integer and every product or quotient goes through the
conversion engine with an explicit rounding direction. The direction is
always the one that favours the pool:

- deposits: share ratio down, grown reserves up, minted liquidity up
- withdrawals: share ratio down, shrunk reserves down, burned liquidity up
- swaps: fee-adjusted input up, payout down
- price: down

Operations are all-or-nothing: new values are computed first (``quote_*``)
and only committed once every check has passed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from cfmm.amm.base import LiquidityChange, SwapResult
from cfmm.amm.errors import EmptyPoolError, InvalidWithdrawal
from cfmm.math.fixed_point import (
    divide_down,
    mul_down,
    mul_up,
    rescale_down,
    rescale_up,
    wide_multiply,
)
from cfmm.safe_int import DivideByZero, FixedPointError, Overflow, Underflow
from cfmm.types import Liquidity, Percentage, Price, Ratio, TokenAmount

if TYPE_CHECKING:
    from cfmm.config import PoolConfig
    from cfmm.models.snapshot import PoolSnapshot

logger = structlog.get_logger()


_REJECTION_REASONS: dict[type[FixedPointError], str] = {
    DivideByZero: "divide_by_zero",
    Overflow: "overflow",
    Underflow: "underflow",
}


def _log_rejection(operation: str, err: FixedPointError, **fields: object) -> None:
    reason = _REJECTION_REASONS.get(type(err), "arithmetic")
    logger.warning(f"{operation}_rejected", reason=reason, error=str(err), **fields)


def _require_amount(amount: object) -> TokenAmount:
    if not isinstance(amount, TokenAmount):
        raise TypeError(f"Expected TokenAmount, got {type(amount).__name__}")
    return amount


class ConstantProductPool:
    """Fee-bearing two-asset pool with a liquidity ledger.

    The pool is either Empty (x = y = l = 0) or Active (x, y, l > 0). Only
    the first deposit moves it from Empty to Active. The fee is fixed at
    construction.

    Example:
        >>> pool = ConstantProductPool(Percentage.from_scale(1, 2))
        >>> pool.add_liquidity(TokenAmount(5))
        Liquidity(2500)
        >>> pool.get_price() == Price.one()
        True
    """

    def __init__(self, fee: Percentage) -> None:
        if not isinstance(fee, Percentage):
            raise TypeError(f"Expected Percentage fee, got {type(fee).__name__}")
        self._fee = fee
        self._x = TokenAmount.zero()
        self._y = TokenAmount.zero()
        self._l = Liquidity.zero()

    @classmethod
    def new(cls, fee: Percentage) -> ConstantProductPool:
        """Create an empty pool charging ``fee`` on swap inputs."""
        return cls(fee)

    @classmethod
    def from_config(cls, config: PoolConfig) -> ConstantProductPool:
        return cls(config.fee)

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot) -> ConstantProductPool:
        """Restore a pool from its raw-integer snapshot.

        Raises:
            ValueError: If the snapshot mixes zero and non-zero state
        """
        x = TokenAmount(int(snapshot.x))
        y = TokenAmount(int(snapshot.y))
        l = Liquidity(int(snapshot.l))  # noqa: E741
        if not (x.is_zero() == y.is_zero() == l.is_zero()):
            raise ValueError(
                f"Reserves and liquidity must be all zero or all positive: x={x}, y={y}, l={l}"
            )
        pool = cls(Percentage(int(snapshot.fee)))
        pool._x, pool._y, pool._l = x, y, l
        return pool

    def snapshot(self) -> PoolSnapshot:
        """Raw-integer snapshot of the pool state."""
        from cfmm.models.snapshot import PoolSnapshot

        return PoolSnapshot(
            x=str(self._x.value),
            y=str(self._y.value),
            l=str(self._l.value),
            fee=str(self._fee.value),
        )

    # --- Accessors ---

    @property
    def fee(self) -> Percentage:
        return self._fee

    @property
    def is_empty(self) -> bool:
        return self._l.is_zero()

    def get_x(self) -> TokenAmount:
        return self._x

    def get_y(self) -> TokenAmount:
        return self._y

    def get_l(self) -> Liquidity:
        return self._l

    def __repr__(self) -> str:
        return (
            f"ConstantProductPool(x={self._x!r}, y={self._y!r}, "
            f"l={self._l!r}, fee={self._fee!r})"
        )

    # --- Liquidity provision ---

    def quote_add_liquidity(self, delta_x: TokenAmount) -> LiquidityChange:
        """Compute the state a deposit of ``delta_x`` would produce.

        The first deposit seeds both reserves with ``delta_x`` (1:1 price)
        and the supply with the raw product x * y. Later deposits grow x, y
        and l by alpha = 1 + delta_x / x (l by alpha^2), so y / x is kept.

        Raises:
            Overflow: If a grown value exceeds its backing width
        """
        delta_x = _require_amount(delta_x)
        try:
            return self._grow(delta_x)
        except FixedPointError as err:
            _log_rejection("add_liquidity", err, delta_x=delta_x.value, x=self._x.value)
            raise

    def _grow(self, delta_x: TokenAmount) -> LiquidityChange:
        if self._l.is_zero():
            seeded = rescale_down(wide_multiply(delta_x, delta_x), Liquidity)
            return LiquidityChange(x=delta_x, y=delta_x, l=seeded, delta_l=seeded)

        # Never credit more share than the contribution represents
        ratio = divide_down(delta_x, self._x, into=Ratio)
        alpha = Ratio.one() + ratio

        # Grown reserves and supply must never under-collateralize the pool
        new_x = mul_up(self._x, alpha)
        new_y = mul_up(self._y, alpha)
        new_l = rescale_up(wide_multiply(self._l, wide_multiply(alpha, alpha)), Liquidity)

        minted = mul_up(ratio, new_l, into=Liquidity)
        return LiquidityChange(x=new_x, y=new_y, l=new_l, delta_l=minted)

    def add_liquidity(self, delta_x: TokenAmount) -> Liquidity:
        """Deposit ``delta_x`` of token X (and the matching Y).

        Returns:
            Liquidity minted for the deposit
        """
        bootstrap = self._l.is_zero()
        change = self.quote_add_liquidity(delta_x)
        self._commit(change)
        logger.debug(
            "add_liquidity",
            bootstrap=bootstrap,
            delta_x=delta_x.value,
            minted=change.delta_l.value,
            x=self._x.value,
            y=self._y.value,
            l=self._l.value,
        )
        return change.delta_l

    # --- Liquidity withdrawal ---

    def quote_remove_liquidity(self, delta_x: TokenAmount) -> LiquidityChange:
        """Compute the state a withdrawal of ``delta_x`` would produce.

        Shrinks x, y by alpha = 1 - delta_x / x and l by alpha^2.

        Raises:
            DivideByZero: If the pool is empty
            InvalidWithdrawal: If delta_x >= x, if delta_x is too small to
                register as a Ratio or to shrink the supply, or if a reserve
                would be drained
        """
        delta_x = _require_amount(delta_x)
        try:
            return self._shrink(delta_x)
        except FixedPointError as err:
            _log_rejection("remove_liquidity", err, delta_x=delta_x.value, x=self._x.value)
            raise

    def _shrink(self, delta_x: TokenAmount) -> LiquidityChange:
        if self._x.is_zero():
            raise DivideByZero("Cannot withdraw from an empty pool")
        if delta_x >= self._x:
            logger.warning(
                "remove_liquidity_rejected",
                reason="exceeds_reserve",
                delta_x=delta_x.value,
                x=self._x.value,
            )
            raise InvalidWithdrawal(f"Cannot withdraw {delta_x} of a reserve of {self._x}")

        # Withdrawal must never be treated as larger than requested
        ratio = divide_down(delta_x, self._x, into=Ratio)
        if ratio.is_zero():
            logger.warning(
                "remove_liquidity_rejected",
                reason="below_resolution",
                delta_x=delta_x.value,
                x=self._x.value,
            )
            raise InvalidWithdrawal(
                f"Withdrawal {delta_x} is below Ratio resolution for reserve {self._x}"
            )
        alpha = Ratio.one() - ratio

        # Remaining providers keep at least their share
        new_x = mul_down(self._x, alpha)
        new_y = mul_down(self._y, alpha)
        new_l = rescale_up(wide_multiply(self._l, wide_multiply(alpha, alpha)), Liquidity)
        if new_l >= self._l:
            logger.warning(
                "remove_liquidity_rejected",
                reason="below_liquidity_resolution",
                delta_x=delta_x.value,
                l=self._l.value,
            )
            raise InvalidWithdrawal(
                f"Withdrawal {delta_x} is below Liquidity resolution for supply {self._l}"
            )

        burned = mul_up(ratio, self._l, into=Liquidity)
        if burned > self._l:
            logger.warning(
                "remove_liquidity_rejected",
                reason="exceeds_supply",
                burned=burned.value,
                l=self._l.value,
            )
            raise InvalidWithdrawal(f"Cannot burn {burned} of a supply of {self._l}")
        if new_y.is_zero():
            logger.warning(
                "remove_liquidity_rejected",
                reason="drains_reserve",
                delta_x=delta_x.value,
                y=self._y.value,
            )
            raise InvalidWithdrawal(f"Withdrawal {delta_x} would drain the Y reserve {self._y}")
        return LiquidityChange(x=new_x, y=new_y, l=new_l, delta_l=burned)

    def remove_liquidity(self, delta_x: TokenAmount) -> Liquidity:
        """Withdraw ``delta_x`` of token X (and the matching Y).

        Returns:
            Liquidity burned for the withdrawal
        """
        change = self.quote_remove_liquidity(delta_x)
        self._commit(change)
        logger.debug(
            "remove_liquidity",
            delta_x=delta_x.value,
            burned=change.delta_l.value,
            x=self._x.value,
            y=self._y.value,
            l=self._l.value,
        )
        return change.delta_l

    # --- Swaps ---

    def quote_swap(self, amount: TokenAmount, in_x: bool) -> SwapResult:
        """Price a swap of ``amount`` without applying it.

        Formula (in_x): out = (amount * (1 - fee)) * y / (x + amount)
        with the fee-adjusted input rounded up and the payout rounded down.
        The in_x = False direction swaps the roles of x and y.

        Raises:
            EmptyPoolError: If the pool has no reserves
            Overflow: If the input reserve would exceed its backing width
            Underflow: If the fee exceeds 100% or the payout exceeds the reserve
        """
        amount = _require_amount(amount)
        if self.is_empty:
            logger.warning("swap_rejected", reason="empty_pool", amount=amount.value, in_x=in_x)
            raise EmptyPoolError("Cannot swap against an empty pool")
        try:
            return self._trade(amount, in_x)
        except FixedPointError as err:
            _log_rejection("swap", err, amount=amount.value, in_x=in_x)
            raise

    def _trade(self, amount: TokenAmount, in_x: bool) -> SwapResult:
        reserve_in, reserve_out = (self._x, self._y) if in_x else (self._y, self._x)
        new_in = reserve_in + amount

        # Fee charged conservatively, payout never above what the curve allows
        effective_in = mul_up(amount, Percentage.one() - self._fee)
        amount_out = divide_down(wide_multiply(effective_in, reserve_out), new_in, into=TokenAmount)
        new_out = reserve_out - amount_out

        if in_x:
            reserve_x, reserve_y = new_in, new_out
        else:
            reserve_x, reserve_y = new_out, new_in
        return SwapResult(
            amount_in=amount,
            effective_in=effective_in,
            amount_out=amount_out,
            in_x=in_x,
            reserve_x=reserve_x,
            reserve_y=reserve_y,
        )

    def swap(self, amount: TokenAmount, in_x: bool) -> None:
        """Swap ``amount`` of X for Y (``in_x``) or of Y for X."""
        result = self.quote_swap(amount, in_x)
        self._x, self._y = result.reserve_x, result.reserve_y
        logger.debug(
            "swap",
            in_x=in_x,
            amount_in=amount.value,
            effective_in=result.effective_in.value,
            amount_out=result.amount_out.value,
            x=self._x.value,
            y=self._y.value,
        )

    # --- Pricing ---

    def get_price(self) -> Price:
        """Spot price y / x at Price scale, rounded down.

        Raises:
            DivideByZero: If the pool is empty
        """
        try:
            return divide_down(self._y, self._x, into=Price)
        except FixedPointError as err:
            _log_rejection("get_price", err, x=self._x.value, y=self._y.value)
            raise

    def _commit(self, change: LiquidityChange) -> None:
        self._x, self._y, self._l = change.x, change.y, change.l
