"""Pytest configuration and fixtures."""

import pytest

from cfmm.amm.constant_product import ConstantProductPool
from cfmm.types import Percentage, TokenAmount


@pytest.fixture
def one_percent() -> Percentage:
    """1% fee (raw 10000 at scale 6)."""
    return Percentage.from_scale(1, 2)


@pytest.fixture
def empty_pool(one_percent: Percentage) -> ConstantProductPool:
    """Freshly constructed pool charging 1%."""
    return ConstantProductPool.new(one_percent)


@pytest.fixture
def feeless_pool() -> ConstantProductPool:
    """1:1 pool with reserves (100, 100) and no fee."""
    pool = ConstantProductPool.new(Percentage(0))
    pool.add_liquidity(TokenAmount(100))
    return pool
