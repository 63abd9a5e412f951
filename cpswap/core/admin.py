"""
Administrative surface: owner-gated pool configuration.

Calls run under the pool's transaction guard like any other mutation, and
only the configured owner may make them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..kernels.python.reward_math import BPS_DENOM
from ..state.balances import Address, Amount
from .errors import (
    CollaboratorTransferFailed,
    InsufficientLiquidity,
    InvalidConfiguration,
    RateOutOfRange,
    Unauthorized,
    ZeroAmount,
)
from .events import EmergencyWithdrawal, OwnershipTransferred, RewardRateUpdated, TokenConfigured
from .guard import guarded

if TYPE_CHECKING:  # pragma: no cover
    from .pool import Pool

logger = logging.getLogger(__name__)

_TOKEN_SLOTS = ("token_a", "token_b", "reward_token")


class PoolAdmin:
    def __init__(self, pool: "Pool", owner: Address) -> None:
        if not isinstance(owner, str) or not owner.strip():
            raise ValueError("owner must be a non-empty string")
        self._pool = pool
        self._guard = pool.guard
        self.owner = owner

    def _require_owner(self, caller: Address) -> None:
        if caller != self.owner:
            logger.warning("rejected admin call from %s", caller)
            raise Unauthorized(f"{caller} is not the pool owner")

    def _set_token(self, caller: Address, slot: str, ledger) -> None:
        self._require_owner(caller)
        if slot not in _TOKEN_SLOTS:
            raise ValueError(f"unknown token slot: {slot}")
        if ledger is None:
            raise InvalidConfiguration(f"{slot} ledger must not be None")
        for other in _TOKEN_SLOTS:
            if other != slot and getattr(self._pool.tokens, other) is ledger:
                raise InvalidConfiguration(f"{ledger.name} is already configured as {other}")
        if slot != "reward_token" and self._pool.state.total_shares != 0:
            raise InvalidConfiguration(f"cannot replace {slot} while the pool holds liquidity")
        setattr(self._pool.tokens, slot, ledger)
        self._pool.events.emit(TokenConfigured(slot=slot, token=ledger.name))

    @guarded
    def set_token_a(self, caller: Address, ledger) -> None:
        self._set_token(caller, "token_a", ledger)

    @guarded
    def set_token_b(self, caller: Address, ledger) -> None:
        self._set_token(caller, "token_b", ledger)

    @guarded
    def set_reward_token(self, caller: Address, ledger) -> None:
        self._set_token(caller, "reward_token", ledger)

    @guarded
    def set_reward_rate_bps(self, caller: Address, value: int) -> None:
        """Fee rate for subsequent swaps; already accrued reward is unaffected."""
        self._require_owner(caller)
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("reward_rate_bps must be an int")
        if not (0 <= value <= BPS_DENOM):
            raise RateOutOfRange(f"reward_rate_bps must be in [0, {BPS_DENOM}]: {value}")
        old = self._pool.state.reward_rate_bps
        self._pool.state.reward_rate_bps = value
        self._pool.events.emit(RewardRateUpdated(old_bps=old, new_bps=value))

    @guarded
    def emergency_withdraw(self, caller: Address, ledger, amount: Amount) -> None:
        """
        Send `amount` of `ledger` held by the pool to the owner.

        For the two pool assets only the surplus above the tracked reserve may
        leave, so every outstanding share stays fully backed.
        """
        self._require_owner(caller)
        if amount == 0:
            raise ZeroAmount("amount must be positive")
        pool = self._pool
        held = ledger.balance_of(pool.address)
        if ledger is pool.tokens.token_a:
            held -= pool.state.reserve_a
        elif ledger is pool.tokens.token_b:
            held -= pool.state.reserve_b
        if amount > held:
            raise InsufficientLiquidity(f"{ledger.name}: withdrawable {max(held, 0)} < {amount}")
        res = ledger.transfer(pool.address, self.owner, amount)
        if not res.ok:
            raise CollaboratorTransferFailed(ledger.name, res.reason or "transfer failed")
        pool.events.emit(EmergencyWithdrawal(token=ledger.name, recipient=self.owner, amount=amount))

    @guarded
    def transfer_ownership(self, caller: Address, new_owner: Address) -> None:
        self._require_owner(caller)
        if not isinstance(new_owner, str) or not new_owner.strip():
            raise ValueError("new_owner must be a non-empty string")
        previous = self.owner
        self.owner = new_owner
        self._pool.events.emit(OwnershipTransferred(previous_owner=previous, new_owner=new_owner))
