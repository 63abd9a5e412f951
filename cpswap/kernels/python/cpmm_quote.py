"""
Constant-product quote kernel.

Pricing is fee-free: the swap fee is accrued separately as an LP reward and is
never deducted from the input before pricing.

    amount_out = floor(reserve_out * amount_in / (reserve_in + amount_in))

Post-swap reserves:
    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out

Floor rounding keeps every truncation loss inside the pool, so
`new_reserve_in * new_reserve_out >= reserve_in * reserve_out`.
"""

from __future__ import annotations

MAX_UINT256 = (1 << 256) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_uint256(name: str, value: int) -> None:
    """Reject anything that is not an int in [0, 2**256 - 1]."""
    _require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_UINT256:
        raise OverflowError(f"{name} exceeds uint256: {value}")


def quote_amount_out(*, reserve_in: int, reserve_out: int, amount_in: int) -> int:
    """
    Compute `floor(reserve_out * amount_in / (reserve_in + amount_in))`.

    Raises ValueError if either reserve is empty.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
    ):
        _require_int(name, v)

    if reserve_in < 0 or reserve_out < 0:
        raise ValueError("reserves must be non-negative")
    if reserve_in == 0 or reserve_out == 0:
        raise ValueError("cannot quote against an empty reserve")
    if amount_in < 0:
        raise ValueError("amount_in must be non-negative")

    return (reserve_out * amount_in) // (reserve_in + amount_in)
