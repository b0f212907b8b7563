"""Result records for pool operations."""

from dataclasses import dataclass

from cfmm.types import Liquidity, TokenAmount


@dataclass(frozen=True)
class SwapResult:
    """Result of pricing a swap against a pool.

    Reserves are the values the pool holds once the swap is applied.
    """

    amount_in: TokenAmount
    effective_in: TokenAmount
    amount_out: TokenAmount
    in_x: bool
    reserve_x: TokenAmount
    reserve_y: TokenAmount


@dataclass(frozen=True)
class LiquidityChange:
    """New pool state produced by a liquidity provision or withdrawal."""

    x: TokenAmount
    y: TokenAmount
    l: Liquidity  # noqa: E741
    # Liquidity minted (provision) or burned (withdrawal)
    delta_l: Liquidity
