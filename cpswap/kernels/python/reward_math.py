"""
Reward-per-share accumulator math (debt-snapshot style).

The accumulator is a fixed-point integer scaled by `ACC_SCALE`. A holder's
`reward_debt` is the accumulator value at their last settlement, so only
reward accrued since then is owed:

    owed = shares * (acc_reward_per_share - reward_debt) // ACC_SCALE

All functions are pure and integer-only.
"""

from __future__ import annotations

from dataclasses import dataclass


ACC_SCALE = 10**18
BPS_DENOM = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class FeeAccrualResult:
    fee: int
    delta_acc: int
    new_acc_reward_per_share: int


@dataclass(frozen=True)
class SettlementResult:
    owed: int
    new_pending_reward: int
    new_reward_debt: int


def compute_fee(*, amount_in: int, reward_rate_bps: int) -> int:
    """
    Compute `fee = floor(amount_in * reward_rate_bps / 10_000)`.
    """
    _require_int("amount_in", amount_in)
    _require_int("reward_rate_bps", reward_rate_bps)
    if amount_in < 0:
        raise ValueError("amount_in must be non-negative")
    if not (0 <= reward_rate_bps <= BPS_DENOM):
        raise ValueError(f"reward_rate_bps must be in [0, {BPS_DENOM}]")
    return (amount_in * reward_rate_bps) // BPS_DENOM


def accrue_fee(
    *,
    acc_reward_per_share: int,
    total_shares: int,
    amount_in: int,
    reward_rate_bps: int,
) -> FeeAccrualResult:
    """
    Spread the fee on `amount_in` across `total_shares`.

    `total_shares` must be positive; a swap cannot happen against an empty pool.
    """
    _require_int("acc_reward_per_share", acc_reward_per_share)
    _require_int("total_shares", total_shares)
    if acc_reward_per_share < 0:
        raise ValueError("acc_reward_per_share must be non-negative")
    if total_shares < 0:
        raise ValueError("total_shares must be non-negative")

    fee = compute_fee(amount_in=amount_in, reward_rate_bps=reward_rate_bps)
    if total_shares == 0:
        raise AssertionError("fee accrued with no outstanding shares")

    delta_acc = (fee * ACC_SCALE) // total_shares
    return FeeAccrualResult(
        fee=fee,
        delta_acc=delta_acc,
        new_acc_reward_per_share=acc_reward_per_share + delta_acc,
    )


def settle_position(
    *,
    shares: int,
    reward_debt: int,
    pending_reward: int,
    acc_reward_per_share: int,
) -> SettlementResult:
    """Move reward accrued since `reward_debt` into `pending_reward`."""
    for name, v in (
        ("shares", shares),
        ("reward_debt", reward_debt),
        ("pending_reward", pending_reward),
        ("acc_reward_per_share", acc_reward_per_share),
    ):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative")
    if reward_debt > acc_reward_per_share:
        raise ValueError("guard failed for settle (reward_debt > acc_reward_per_share)")

    owed = (shares * (acc_reward_per_share - reward_debt)) // ACC_SCALE
    return SettlementResult(
        owed=owed,
        new_pending_reward=pending_reward + owed,
        new_reward_debt=acc_reward_per_share,
    )
