"""
Pool state for a two-asset constant-product pool.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .balances import Amount
from .positions import PositionTable


BPS_DENOM = 10_000


@dataclass
class PoolState:
    """
    Mutable state of the pool aggregate.

    Attributes:
        reserve_a: Reserve of asset A (minor units)
        reserve_b: Reserve of asset B (minor units)
        total_shares: Sum of all outstanding liquidity shares
        reward_rate_bps: Fee taken per swap input, in basis points (0-10000)
        acc_reward_per_share: Reward accumulator scaled by ACC_SCALE
        positions: Provider positions
    """
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    total_shares: Amount = 0
    reward_rate_bps: int = 0
    acc_reward_per_share: int = 0
    positions: PositionTable = field(default_factory=PositionTable)

    def __post_init__(self):
        """Validate pool state ranges."""
        if not (0 <= self.reward_rate_bps <= BPS_DENOM):
            raise ValueError(f"reward_rate_bps must be in [0, {BPS_DENOM}]: {self.reward_rate_bps}")

        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValueError(
                f"Reserves must be non-negative: ({self.reserve_a}, {self.reserve_b})"
            )

        if self.total_shares < 0:
            raise ValueError(f"total_shares must be non-negative: {self.total_shares}")

        if self.acc_reward_per_share < 0:
            raise ValueError(f"acc_reward_per_share must be non-negative: {self.acc_reward_per_share}")

    def snapshot(self) -> "PoolState":
        """Deep copy used to roll back a failed operation."""
        return PoolState(
            reserve_a=self.reserve_a,
            reserve_b=self.reserve_b,
            total_shares=self.total_shares,
            reward_rate_bps=self.reward_rate_bps,
            acc_reward_per_share=self.acc_reward_per_share,
            positions=self.positions.copy(),
        )

    def restore(self, snap: "PoolState") -> None:
        """Overwrite every field with the values held by `snap`."""
        self.reserve_a = snap.reserve_a
        self.reserve_b = snap.reserve_b
        self.total_shares = snap.total_shares
        self.reward_rate_bps = snap.reward_rate_bps
        self.acc_reward_per_share = snap.acc_reward_per_share
        self.positions = snap.positions.copy()

    def product(self) -> int:
        return self.reserve_a * self.reserve_b
