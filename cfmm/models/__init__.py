"""Serialization models for the pool core."""

from cfmm.models.snapshot import PoolSnapshot
from cfmm.models.types import RawU64, RawU128

__all__ = ["PoolSnapshot", "RawU64", "RawU128"]
