"""
Core pool components
"""

from .admin import PoolAdmin
from .errors import (
    ArithmeticOverflow,
    CollaboratorTransferFailed,
    InsufficientLiquidity,
    InvalidConfiguration,
    InvariantViolation,
    NoPosition,
    NothingToClaim,
    PoolError,
    RateOutOfRange,
    ReentrancyDetected,
    SlippageExceeded,
    Unauthorized,
    ZeroAmount,
    ZeroSharesMinted,
)
from .events import (
    EventLog,
    LiquidityAdded,
    LiquidityRemoved,
    RewardsClaimed,
    Swapped,
)
from .guard import TransactionGuard
from .liquidity import LiquidityAccounting
from .pool import Pool
from .reserves import ReserveLedger
from .rewards import SCALE, RewardAccumulator
from .types import Direction, GuardState

__all__ = [
    "Pool",
    "PoolAdmin",
    "ReserveLedger",
    "LiquidityAccounting",
    "RewardAccumulator",
    "TransactionGuard",
    "SCALE",
    "Direction",
    "GuardState",
    "EventLog",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swapped",
    "RewardsClaimed",
    "PoolError",
    "InvalidConfiguration",
    "ZeroAmount",
    "InsufficientLiquidity",
    "SlippageExceeded",
    "ZeroSharesMinted",
    "NoPosition",
    "NothingToClaim",
    "ReentrancyDetected",
    "Unauthorized",
    "RateOutOfRange",
    "CollaboratorTransferFailed",
    "ArithmeticOverflow",
    "InvariantViolation",
]
