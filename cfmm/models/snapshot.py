"""Pydantic model for the serialized pool state."""

from pydantic import BaseModel, ConfigDict

from cfmm.models.types import RawU64, RawU128


class PoolSnapshot(BaseModel):
    """Raw-integer encoding of a ConstantProductPool.

    Example:
        {"x": "100", "y": "100", "l": "1000000", "fee": "3000"}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: RawU128
    y: RawU128
    l: RawU128  # noqa: E741
    fee: RawU64
