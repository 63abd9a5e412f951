"""
Reward accumulator: per-trade fees spread over outstanding shares.

A scaled accumulator (`acc_reward_per_share`, factor `ACC_SCALE`) only ever
grows. Each position snapshots it in `reward_debt` when settled, so a
settlement pays exactly the reward earned by the shares held since the last
snapshot. Settle a position before changing its shares.
"""

from __future__ import annotations

from ..kernels.python.reward_math import ACC_SCALE, accrue_fee, settle_position
from ..state.balances import Address, Amount
from ..state.pool import PoolState
from .errors import NothingToClaim

SCALE = ACC_SCALE


class RewardAccumulator:
    def __init__(self, state: PoolState) -> None:
        self._state = state

    def on_swap_fee(self, amount_in: Amount) -> Amount:
        """
        Accrue the fee on a swap input and return it.

            fee = amount_in * reward_rate_bps // 10_000
            acc_reward_per_share += fee * SCALE // total_shares

        Swaps require non-empty reserves, which require outstanding shares, so
        `total_shares == 0` here is a bug and fails the assertion in the kernel.
        """
        res = accrue_fee(
            acc_reward_per_share=self._state.acc_reward_per_share,
            total_shares=self._state.total_shares,
            amount_in=amount_in,
            reward_rate_bps=self._state.reward_rate_bps,
        )
        self._state.acc_reward_per_share = res.new_acc_reward_per_share
        return res.fee

    def settle(self, provider: Address) -> Amount:
        """Move accrued reward into `pending_reward`; return the amount moved."""
        if provider not in self._state.positions:
            return 0
        position = self._state.positions.get(provider)
        res = settle_position(
            shares=position.shares,
            reward_debt=position.reward_debt,
            pending_reward=position.pending_reward,
            acc_reward_per_share=self._state.acc_reward_per_share,
        )
        position.pending_reward = res.new_pending_reward
        position.reward_debt = res.new_reward_debt
        return res.owed

    def pending(self, provider: Address) -> Amount:
        """What `claim` would pay right now (read-only)."""
        position = self._state.positions.get(provider)
        return settle_position(
            shares=position.shares,
            reward_debt=position.reward_debt,
            pending_reward=position.pending_reward,
            acc_reward_per_share=self._state.acc_reward_per_share,
        ).new_pending_reward

    def claim(self, provider: Address) -> Amount:
        """
        Settle, then zero and return the pending reward.

        Raises:
            NothingToClaim: If nothing is pending after settlement
        """
        if self.pending(provider) == 0:
            raise NothingToClaim(f"{provider} has no pending reward")
        self.settle(provider)
        position = self._state.positions.get(provider)
        amount = position.pending_reward
        position.pending_reward = 0
        self._state.positions.prune(provider)
        return amount
