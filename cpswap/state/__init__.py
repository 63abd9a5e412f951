"""
State management for the cpswap pool
"""

from .balances import Address, Amount, BalanceTable
from .pool import PoolState
from .positions import LiquidityPosition, PositionTable

__all__ = [
    "Address",
    "Amount",
    "BalanceTable",
    "PoolState",
    "LiquidityPosition",
    "PositionTable",
]
