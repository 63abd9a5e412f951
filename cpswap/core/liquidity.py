"""
Liquidity accounting: mint and burn proportional ownership shares.

Each operation is split into a `plan_*` step (all checks, no mutation) and an
`apply_*` step (mutation only), so the pool can run every check for an
operation before it touches any field.
"""

from typing import Tuple

from ..kernels.python.lp_math import BurnSharesResult, MintSharesResult, burn_shares, mint_shares
from ..state.balances import Address, Amount
from ..state.pool import PoolState
from .errors import NoPosition, ZeroAmount, ZeroSharesMinted
from .reserves import ReserveLedger


class LiquidityAccounting:
    def __init__(self, state: PoolState, reserves: ReserveLedger) -> None:
        self._state = state
        self._reserves = reserves

    def plan_add(self, amount_a: Amount, amount_b: Amount) -> MintSharesResult:
        """
        Shares that depositing exactly (amount_a, amount_b) would mint.

        First deposit (total_shares == 0):
            shares = isqrt(amount_a * amount_b)

        Subsequent deposits:
            shares = min(amount_a * total_shares // reserve_a,
                         amount_b * total_shares // reserve_b)

        Raises:
            ZeroAmount: If either amount is zero
            ZeroSharesMinted: If the result rounds down to zero
        """
        if amount_a == 0 or amount_b == 0:
            raise ZeroAmount(f"deposit amounts must be positive: ({amount_a}, {amount_b})")

        plan = mint_shares(
            reserve_a=self._state.reserve_a,
            reserve_b=self._state.reserve_b,
            total_shares=self._state.total_shares,
            amount_a=amount_a,
            amount_b=amount_b,
        )
        if plan.shares_minted == 0:
            raise ZeroSharesMinted(
                f"deposit ({amount_a}, {amount_b}) mints zero shares against "
                f"reserves ({self._state.reserve_a}, {self._state.reserve_b})"
            )
        return plan

    def apply_add(self, provider: Address, amount_a: Amount, amount_b: Amount, plan: MintSharesResult) -> None:
        # Reserves grow by the full deposit, whichever side bounded the mint.
        position = self._state.positions.get_or_create(
            provider, reward_debt=self._state.acc_reward_per_share
        )
        position.shares += plan.shares_minted
        self._state.total_shares += plan.shares_minted
        self._reserves.deposit(amount_a, amount_b)

    def add_liquidity(self, provider: Address, amount_a: Amount, amount_b: Amount) -> Amount:
        plan = self.plan_add(amount_a, amount_b)
        self.apply_add(provider, amount_a, amount_b, plan)
        return plan.shares_minted

    def plan_remove(self, provider: Address) -> Tuple[Amount, BurnSharesResult]:
        """
        Amounts paid out for burning every share the provider holds.

            amount_x = reserve_x * shares // total_shares

        Raises:
            NoPosition: If the provider holds no shares
        """
        shares = self._state.positions.get(provider).shares
        if shares == 0:
            raise NoPosition(f"{provider} holds no shares")
        plan = burn_shares(
            shares=shares,
            reserve_a=self._state.reserve_a,
            reserve_b=self._state.reserve_b,
            total_shares=self._state.total_shares,
        )
        return shares, plan

    def apply_remove(self, provider: Address, shares: Amount, plan: BurnSharesResult) -> None:
        position = self._state.positions.get_or_create(provider)
        position.shares -= shares
        self._state.total_shares -= shares
        self._reserves.withdraw(plan.amount_a_out, plan.amount_b_out)
        self._state.positions.prune(provider)

    def remove_liquidity(self, provider: Address) -> Tuple[Amount, Amount]:
        shares, plan = self.plan_remove(provider)
        self.apply_remove(provider, shares, plan)
        return plan.amount_a_out, plan.amount_b_out
