"""Pool configuration."""

import os
from dataclasses import dataclass, field

from cfmm.constants import DEFAULT_FEE_RAW
from cfmm.types import Percentage

# Environment variable holding the fee as a decimal string (e.g. "0.003")
FEE_ENV_VAR = "CFMM_FEE"


@dataclass(frozen=True)
class PoolConfig:
    """Configuration for creating a pool.

    Attributes:
        fee: Swap fee charged on the input amount (default: 0.3%). Not
            range-checked; the caller supplies a sane rate.
    """

    fee: Percentage = field(default_factory=lambda: Percentage(DEFAULT_FEE_RAW))


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()


def load_config_from_env() -> PoolConfig:
    """Build a PoolConfig from environment variables.

    Configuration via environment variables:
    - CFMM_FEE: Swap fee as a decimal string (default: 0.003)

    Raises:
        ValueError: If CFMM_FEE is not a decimal with at most 6 fractional digits
    """
    raw = os.environ.get(FEE_ENV_VAR)
    if raw is None or not raw.strip():
        return DEFAULT_POOL_CONFIG
    return PoolConfig(fee=Percentage.from_str(raw))
