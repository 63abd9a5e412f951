"""
cpswap: two-asset constant-product pool with pro-rata swap-fee rewards.
"""

from .core import Direction, Pool, PoolError

__all__ = ["Direction", "Pool", "PoolError"]
