"""
Pool orchestration.

This module wires the reserve ledger, liquidity accounting and reward
accumulator into the public operation surface. Every operation:

1. Acquires the transaction guard (nested entries are rejected).
2. Runs all precondition checks; the first failure aborts with no mutation.
3. Snapshots state, settles rewards for the affected holder and mutates.
4. Checks invariants on the post-state.
5. Calls the token ledgers; a failed call reverses completed transfers
   and restores the snapshot.
6. Emits an event and releases the guard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ..kernels.python.cpmm_quote import require_uint256
from ..state.balances import Address, Amount
from ..state.pool import PoolState
from ..state.positions import LiquidityPosition
from .admin import PoolAdmin
from .errors import (
    ArithmeticOverflow,
    CollaboratorTransferFailed,
    InvalidConfiguration,
    InvariantViolation,
    NothingToClaim,
    PoolError,
    SlippageExceeded,
    ZeroAmount,
)
from .events import EventLog, LiquidityAdded, LiquidityRemoved, RewardsClaimed, Swapped
from .guard import TransactionGuard, guarded
from .invariants import check_transition
from .liquidity import LiquidityAccounting
from .reserves import ReserveLedger
from .rewards import RewardAccumulator
from .types import Direction, GuardState

logger = logging.getLogger(__name__)


def _require_amount(name: str, value: int) -> None:
    try:
        require_uint256(name, value)
    except OverflowError as exc:
        raise ArithmeticOverflow(str(exc)) from exc


@dataclass
class PoolTokens:
    """Token ledgers the pool trades; set through `PoolAdmin`."""

    token_a: Optional[object] = None
    token_b: Optional[object] = None
    reward_token: Optional[object] = None


class _Transaction:
    """
    One all-or-nothing mutation of the pool.

    On any exception raised inside the `with` block, payouts already pushed
    are pulled back, input tokens already pulled are refunded and the state
    snapshot is restored. If a pushed payout cannot be pulled back the
    ledgers no longer match the snapshot, so the post-state is kept instead
    and `CollaboratorTransferFailed(committed=True)` is raised.
    """

    def __init__(self, pool: "Pool", operation: str) -> None:
        self._pool = pool
        self._operation = operation
        self._before = pool._state.snapshot()
        self._pulled: List[Tuple[object, Address, Amount]] = []
        self._pushed: List[Tuple[object, Address, Amount]] = []

    def __enter__(self) -> "_Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            logger.debug("%s committed", self._operation)
            return False
        stuck = self._reverse_pushes()
        if stuck is not None:
            logger.error(
                "%s failed (%s) after paying out; %s payout could not be reversed, keeping post-state",
                self._operation,
                exc_type.__name__,
                stuck,
            )
            raise CollaboratorTransferFailed(
                stuck, f"{self._operation} payout could not be reversed after: {exc}", committed=True
            ) from exc
        logger.warning("%s failed (%s); restoring pool state", self._operation, exc_type.__name__)
        self._pool._state.restore(self._before)
        self._refund()
        return False

    def check(self, *, swapped: bool = False) -> None:
        violations = check_transition(self._before, self._pool._state, swapped=swapped)
        if "inv_values_fit_uint256" in violations:
            raise ArithmeticOverflow(f"{self._operation} would overflow uint256")
        if violations:
            raise InvariantViolation(violations)

    def pull(self, token, sender: Address, amount: Amount) -> None:
        if amount == 0:
            return
        pool = self._pool.address
        self._call(token, "transfer_from", lambda: token.transfer_from(pool, sender, pool, amount))
        self._pulled.append((token, sender, amount))

    def push(self, token, recipient: Address, amount: Amount) -> None:
        if amount == 0:
            return
        self._call(token, "transfer", lambda: token.transfer(self._pool.address, recipient, amount))
        self._pushed.append((token, recipient, amount))

    def mint(self, token, recipient: Address, amount: Amount) -> None:
        self._call(token, "mint", lambda: token.mint(recipient, amount))

    @staticmethod
    def _call(token, what: str, fn) -> None:
        # Pool errors (e.g. a reentrant callback) keep their own cause.
        try:
            res = fn()
        except PoolError:
            raise
        except Exception as exc:
            raise CollaboratorTransferFailed(token.name, f"{what} raised {type(exc).__name__}: {exc}") from exc
        if not res.ok:
            raise CollaboratorTransferFailed(token.name, res.reason or f"{what} failed")

    def _reverse_pushes(self) -> Optional[str]:
        """Pull back pushed payouts; return the token name of the first that cannot be."""
        pool = self._pool.address
        while self._pushed:
            token, recipient, amount = self._pushed.pop()
            try:
                res = token.transfer_from(pool, recipient, pool, amount)
            except Exception as exc:
                logger.error("%s: reversing payout of %s from %s raised: %s", token.name, amount, recipient, exc)
                return token.name
            if not res.ok:
                logger.error(
                    "%s: reversing payout of %s from %s failed: %s", token.name, amount, recipient, res.reason
                )
                return token.name
        return None

    def _refund(self) -> None:
        for token, sender, amount in reversed(self._pulled):
            try:
                res = token.transfer(self._pool.address, sender, amount)
            except Exception as exc:
                logger.error("%s: refund of %s to %s raised: %s", token.name, amount, sender, exc)
                continue
            if not res.ok:
                logger.error(
                    "%s: refund of %s to %s failed: %s", token.name, amount, sender, res.reason
                )


class Pool:
    """
    Two-asset constant-product pool with pro-rata swap-fee rewards.

    The pool owns its `PoolState`; no state is shared between instances.
    """

    def __init__(
        self,
        *,
        owner: Address,
        address: Address = "pool",
        reward_rate_bps: int = 0,
        events: Optional[EventLog] = None,
    ) -> None:
        self.address = address
        self.tokens = PoolTokens()
        self.events = events if events is not None else EventLog()
        self._state = PoolState(reward_rate_bps=reward_rate_bps)
        self._guard = TransactionGuard()
        self.reserve_ledger = ReserveLedger(self._state)
        self.liquidity = LiquidityAccounting(self._state, self.reserve_ledger)
        self.rewards = RewardAccumulator(self._state)
        self.admin = PoolAdmin(self, owner)

    # -- Views -----------------------------------------------------------------

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def guard(self) -> TransactionGuard:
        return self._guard

    @property
    def guard_state(self) -> GuardState:
        return self._guard.state

    @property
    def total_shares(self) -> Amount:
        return self._state.total_shares

    @property
    def reward_rate_bps(self) -> int:
        return self._state.reward_rate_bps

    @property
    def acc_reward_per_share(self) -> int:
        return self._state.acc_reward_per_share

    def reserves(self) -> Tuple[Amount, Amount]:
        return self.reserve_ledger.reserves()

    def position(self, provider: Address) -> LiquidityPosition:
        """Copy of the provider's position (empty if none)."""
        return self._state.positions.get(provider).copy()

    def positions(self) -> Iterator[Tuple[Address, LiquidityPosition]]:
        return ((k, v.copy()) for k, v in self._state.positions.items())

    def pending_rewards(self, provider: Address) -> Amount:
        return self.rewards.pending(provider)

    def quote(self, amount_in: Amount, direction: Direction) -> Amount:
        _require_amount("amount_in", amount_in)
        return self.reserve_ledger.quote_for(amount_in, direction)

    # -- Operations ------------------------------------------------------------

    @guarded
    def add_liquidity(self, provider: Address, amount_a: Amount, amount_b: Amount) -> Amount:
        """Deposit exactly (amount_a, amount_b) and return the shares minted."""
        token_a, token_b = self._require_pair()
        _require_amount("amount_a", amount_a)
        _require_amount("amount_b", amount_b)
        plan = self.liquidity.plan_add(amount_a, amount_b)

        logger.debug("add_liquidity %s (%s, %s) -> %s shares", provider, amount_a, amount_b, plan.shares_minted)
        with _Transaction(self, "add_liquidity") as tx:
            self.rewards.settle(provider)
            self.liquidity.apply_add(provider, amount_a, amount_b, plan)
            tx.check()
            tx.pull(token_a, provider, amount_a)
            tx.pull(token_b, provider, amount_b)

        self.events.emit(
            LiquidityAdded(provider=provider, amount_a=amount_a, amount_b=amount_b, shares=plan.shares_minted)
        )
        return plan.shares_minted

    @guarded
    def remove_liquidity(self, provider: Address) -> Tuple[Amount, Amount]:
        """Burn every share the provider holds and pay out both assets."""
        token_a, token_b = self._require_pair()
        shares, plan = self.liquidity.plan_remove(provider)

        logger.debug(
            "remove_liquidity %s: %s shares -> (%s, %s)", provider, shares, plan.amount_a_out, plan.amount_b_out
        )
        with _Transaction(self, "remove_liquidity") as tx:
            self.rewards.settle(provider)
            self.liquidity.apply_remove(provider, shares, plan)
            tx.check()
            tx.push(token_a, provider, plan.amount_a_out)
            tx.push(token_b, provider, plan.amount_b_out)

        self.events.emit(
            LiquidityRemoved(
                provider=provider, amount_a=plan.amount_a_out, amount_b=plan.amount_b_out, shares=shares
            )
        )
        return plan.amount_a_out, plan.amount_b_out

    @guarded
    def swap(self, trader: Address, amount_in: Amount, direction: Direction, min_amount_out: Amount = 0) -> Amount:
        """Sell `amount_in` of the input asset; return the output amount."""
        if not isinstance(direction, Direction):
            raise TypeError(f"direction must be a Direction, got {type(direction).__name__}")
        token_a, token_b = self._require_pair()
        token_in, token_out = (token_a, token_b) if direction is Direction.A_TO_B else (token_b, token_a)
        _require_amount("amount_in", amount_in)
        _require_amount("min_amount_out", min_amount_out)
        if amount_in == 0:
            raise ZeroAmount("amount_in must be positive")
        amount_out = self.reserve_ledger.quote_for(amount_in, direction)
        if amount_out < min_amount_out:
            exc = SlippageExceeded(amount_out, min_amount_out)
            logger.warning("swap rejected: %s", exc)
            raise exc

        logger.debug("swap %s %s %s -> %s", trader, direction.value, amount_in, amount_out)
        with _Transaction(self, "swap") as tx:
            fee = self.rewards.on_swap_fee(amount_in)
            self.reserve_ledger.apply_swap(amount_in, amount_out, direction)
            tx.check(swapped=True)
            tx.pull(token_in, trader, amount_in)
            tx.push(token_out, trader, amount_out)

        self.events.emit(
            Swapped(trader=trader, direction=direction, amount_in=amount_in, amount_out=amount_out, fee=fee)
        )
        return amount_out

    @guarded
    def claim_rewards(self, provider: Address) -> Amount:
        """Mint the provider's settled reward to them and return the amount."""
        reward_token = self.tokens.reward_token
        if reward_token is None:
            raise InvalidConfiguration("reward token is not configured")
        if self.rewards.pending(provider) == 0:
            raise NothingToClaim(f"{provider} has no pending reward")

        with _Transaction(self, "claim_rewards") as tx:
            amount = self.rewards.claim(provider)
            tx.check()
            tx.mint(reward_token, provider, amount)

        self.events.emit(RewardsClaimed(provider=provider, amount=amount))
        return amount

    # -- Helpers ---------------------------------------------------------------

    def _require_pair(self) -> Tuple[object, object]:
        if self.tokens.token_a is None or self.tokens.token_b is None:
            raise InvalidConfiguration("token A and token B must both be configured")
        return self.tokens.token_a, self.tokens.token_b

    def __repr__(self) -> str:
        return (
            f"Pool(reserves=({self._state.reserve_a}, {self._state.reserve_b}), "
            f"total_shares={self._state.total_shares}, reward_rate_bps={self._state.reward_rate_bps})"
        )
