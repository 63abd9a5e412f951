"""
Liquidity share math.

Pure functions with explicit floor rounding:
- first deposit mints `isqrt(amount_a * amount_b)` shares (no locked minimum),
- later deposits mint the smaller of the two proportional claims,
- burns pay out `reserve * shares // total_shares` of each asset.

Deposits are taken in full even when the ratio is skewed; the excess of the
larger side stays in the pool.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class MintSharesResult:
    shares_minted: int
    new_reserve_a: int
    new_reserve_b: int
    new_total_shares: int


@dataclass(frozen=True)
class BurnSharesResult:
    amount_a_out: int
    amount_b_out: int
    new_reserve_a: int
    new_reserve_b: int
    new_total_shares: int


def mint_shares(
    *,
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
    amount_a: int,
    amount_b: int,
) -> MintSharesResult:
    """
    Shares minted for depositing exactly `(amount_a, amount_b)`.

    May return `shares_minted == 0`; callers decide whether that is an error.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_shares", total_shares),
        ("amount_a", amount_a),
        ("amount_b", amount_b),
    ):
        _require_int(name, v)

    if reserve_a < 0 or reserve_b < 0:
        raise ValueError("reserves must be non-negative")
    if total_shares < 0:
        raise ValueError("total_shares must be non-negative")
    if amount_a <= 0 or amount_b <= 0:
        raise ValueError("deposit amounts must be positive")

    if total_shares == 0:
        if reserve_a != 0 or reserve_b != 0:
            raise ValueError("cannot mint initial shares when reserves are non-zero")
        minted = math.isqrt(amount_a * amount_b)
    else:
        if reserve_a == 0 or reserve_b == 0:
            raise ValueError("cannot mint into an empty reserve when total_shares > 0")
        shares_a = (amount_a * total_shares) // reserve_a
        shares_b = (amount_b * total_shares) // reserve_b
        minted = min(shares_a, shares_b)

    return MintSharesResult(
        shares_minted=minted,
        new_reserve_a=reserve_a + amount_a,
        new_reserve_b=reserve_b + amount_b,
        new_total_shares=total_shares + minted,
    )


def burn_shares(*, shares: int, reserve_a: int, reserve_b: int, total_shares: int) -> BurnSharesResult:
    """
    Burn `shares` for the underlying assets (floor rounding).
    """
    for name, v in (
        ("shares", shares),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_shares", total_shares),
    ):
        _require_int(name, v)

    if shares <= 0:
        raise ValueError("shares must be positive")
    if reserve_a < 0 or reserve_b < 0:
        raise ValueError("reserves must be non-negative")
    if total_shares <= 0:
        raise ValueError("total_shares must be positive")
    if shares > total_shares:
        raise ValueError("cannot burn more than total_shares")

    amount_a_out = (reserve_a * shares) // total_shares
    amount_b_out = (reserve_b * shares) // total_shares
    if amount_a_out > reserve_a or amount_b_out > reserve_b:
        raise AssertionError("burn paid out more than the reserve")

    return BurnSharesResult(
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
        new_reserve_a=reserve_a - amount_a_out,
        new_reserve_b=reserve_b - amount_b_out,
        new_total_shares=total_shares - shares,
    )
