"""Exception types for the cpswap pool.

Every rejected operation raises exactly one of these, chosen by the first
precondition that failed. `code` is a stable identifier for CLI output and
logs.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for all pool rejections."""

    code = "pool_error"


class InvalidConfiguration(PoolError):
    """Raised when a token ledger the operation needs is not configured."""

    code = "invalid_configuration"


class ZeroAmount(PoolError):
    """Raised when a required amount is zero."""

    code = "zero_amount"


class InsufficientLiquidity(PoolError):
    """Raised when a reserve needed for pricing or withdrawal is empty."""

    code = "insufficient_liquidity"


class SlippageExceeded(PoolError):
    """Raised when the quoted output is below the caller's minimum."""

    code = "slippage_exceeded"

    def __init__(self, amount_out: int, min_amount_out: int) -> None:
        self.amount_out = amount_out
        self.min_amount_out = min_amount_out
        super().__init__(f"amount_out ({amount_out}) < min_amount_out ({min_amount_out})")


class ZeroSharesMinted(PoolError):
    """Raised when rounding collapses a deposit to zero shares."""

    code = "zero_shares_minted"


class NoPosition(PoolError):
    """Raised when the caller holds no shares."""

    code = "no_position"


class NothingToClaim(PoolError):
    """Raised when the caller has no settled reward to claim."""

    code = "nothing_to_claim"


class ReentrancyDetected(PoolError):
    """Raised when a guarded operation is entered while one is in flight."""

    code = "reentrancy_detected"


class Unauthorized(PoolError):
    """Raised when an administrative call comes from a non-owner."""

    code = "unauthorized"


class RateOutOfRange(PoolError):
    """Raised when a reward rate above 10_000 bps is requested."""

    code = "rate_out_of_range"


class CollaboratorTransferFailed(PoolError):
    """Raised when a token ledger rejects (or raises on) a transfer or mint.

    `committed` is True when a payout already sent could not be reversed:
    the pool then keeps the post-operation state, and any payout that was not
    delivered remains in the pool as surplus above the tracked reserves.
    """

    code = "collaborator_transfer_failed"

    def __init__(self, token: str, reason: str, *, committed: bool = False) -> None:
        self.token = token
        self.reason = reason
        self.committed = committed
        super().__init__(f"{token}: {reason}" + (" (committed)" if committed else ""))


class ArithmeticOverflow(PoolError):
    """Raised when an amount or stored value leaves the uint256 range."""

    code = "arithmetic_overflow"


class InvariantViolation(PoolError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant_violation"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
