"""
Liquidity position tracking.

Positions are keyed by provider address. An entry exists while the provider
holds shares or has unclaimed reward; fully empty positions are dropped to
keep the table sparse.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from .balances import Address, Amount


@dataclass
class LiquidityPosition:
    """One provider's claim on the pool plus its reward bookkeeping."""

    shares: Amount = 0
    reward_debt: int = 0
    pending_reward: Amount = 0

    def __post_init__(self) -> None:
        if self.shares < 0:
            raise ValueError("shares must be non-negative")
        if self.reward_debt < 0:
            raise ValueError("reward_debt must be non-negative")
        if self.pending_reward < 0:
            raise ValueError("pending_reward must be non-negative")

    def is_empty(self) -> bool:
        return self.shares == 0 and self.pending_reward == 0

    def copy(self) -> "LiquidityPosition":
        return LiquidityPosition(
            shares=self.shares,
            reward_debt=self.reward_debt,
            pending_reward=self.pending_reward,
        )


class PositionTable:
    """
    Position table mapping provider -> LiquidityPosition.

    Notes:
    - `get()` never inserts; use `get_or_create()` on write paths.
    - `prune()` removes an entry once it holds neither shares nor reward.
    """

    def __init__(self) -> None:
        self._positions: Dict[Address, LiquidityPosition] = {}

    def get(self, provider: Address) -> LiquidityPosition:
        """Return the provider's position, or an empty detached one."""
        position = self._positions.get(provider)
        if position is None:
            return LiquidityPosition()
        return position

    def get_or_create(self, provider: Address, *, reward_debt: int = 0) -> LiquidityPosition:
        """New positions start with `reward_debt` so they earn nothing retroactively."""
        position = self._positions.get(provider)
        if position is None:
            position = LiquidityPosition(reward_debt=reward_debt)
            self._positions[provider] = position
        return position

    def prune(self, provider: Address) -> None:
        position = self._positions.get(provider)
        if position is not None and position.is_empty():
            del self._positions[provider]

    def total_shares(self) -> Amount:
        """Sum of shares over every position."""
        return sum(p.shares for p in self._positions.values())

    def items(self) -> Iterator[Tuple[Address, LiquidityPosition]]:
        return iter(sorted(self._positions.items()))

    def copy(self) -> "PositionTable":
        out = PositionTable()
        out._positions = {k: v.copy() for k, v in self._positions.items()}
        return out

    def __contains__(self, provider: object) -> bool:
        return provider in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"PositionTable({len(self._positions)} entries)"
