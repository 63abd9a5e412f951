"""Invariant checkers for the pool state.

Each function returns True when the invariant holds; `check_all()` returns
the list of violated invariant IDs (empty = all pass). Transition invariants
(product and accumulator monotonicity) compare a pre-state snapshot with the
post-state and live in `check_transition()`.
"""

from __future__ import annotations

from typing import Callable

from ..kernels.python.cpmm_quote import MAX_UINT256
from ..state.pool import PoolState


def inv_empty_iff_no_shares(s: PoolState) -> bool:
    if s.total_shares == 0:
        return s.reserve_a == 0 and s.reserve_b == 0
    return s.reserve_a > 0 and s.reserve_b > 0


def inv_share_conservation(s: PoolState) -> bool:
    return s.positions.total_shares() == s.total_shares


def inv_debt_not_ahead_of_acc(s: PoolState) -> bool:
    return all(p.reward_debt <= s.acc_reward_per_share for _, p in s.positions.items())


def inv_reward_rate_bounded(s: PoolState) -> bool:
    return 0 <= s.reward_rate_bps <= 10_000


def inv_values_fit_uint256(s: PoolState) -> bool:
    for v in (s.reserve_a, s.reserve_b, s.total_shares, s.acc_reward_per_share):
        if not (0 <= v <= MAX_UINT256):
            return False
    for _, p in s.positions.items():
        for v in (p.shares, p.reward_debt, p.pending_reward):
            if not (0 <= v <= MAX_UINT256):
                return False
    return True


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[PoolState], bool]] = {
    "inv_empty_iff_no_shares": inv_empty_iff_no_shares,
    "inv_share_conservation": inv_share_conservation,
    "inv_debt_not_ahead_of_acc": inv_debt_not_ahead_of_acc,
    "inv_reward_rate_bounded": inv_reward_rate_bounded,
    "inv_values_fit_uint256": inv_values_fit_uint256,
}


def check_all(state: PoolState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def check_transition(before: PoolState, after: PoolState, *, swapped: bool = False) -> list[str]:
    """Post-state checks plus the monotonicity rules between two states."""
    violations = check_all(after)
    if after.acc_reward_per_share < before.acc_reward_per_share:
        violations.append("inv_acc_monotone")
    if swapped and after.product() < before.product():
        violations.append("inv_product_monotone")
    return violations
