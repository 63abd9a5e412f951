"""
Token ledger collaborators.

The pool only depends on the `TokenLedger` / `RewardToken` protocols. The
in-memory ledgers here back the CLI and the tests; they follow ERC-20 shapes
(allowances, `transfer_from` by an approved spender) and can run a hook after
each successful transfer, which is how a token calls back into the pool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

from ..state.balances import Address, Amount, BalanceTable

logger = logging.getLogger(__name__)

TransferHook = Callable[[Address, Address, Amount], None]


@dataclass(frozen=True)
class TransferResult:
    ok: bool
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "TransferResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> "TransferResult":
        return cls(ok=False, reason=reason)


@runtime_checkable
class TokenLedger(Protocol):
    name: str

    def transfer_from(self, spender: Address, sender: Address, recipient: Address, amount: Amount) -> TransferResult:
        ...

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> TransferResult:
        ...

    def balance_of(self, holder: Address) -> Amount:
        ...


@runtime_checkable
class RewardToken(TokenLedger, Protocol):
    def mint(self, recipient: Address, amount: Amount) -> TransferResult:
        ...


class InMemoryTokenLedger:
    """
    Fungible token held in a `BalanceTable`.

    If `after_transfer` raises, the transfer that triggered it is undone and
    the exception propagates, the way a reverting token call would.
    """

    def __init__(self, name: str, *, after_transfer: Optional[TransferHook] = None) -> None:
        self.name = name
        self.after_transfer = after_transfer
        self._balances = BalanceTable()
        self._allowances: Dict[Tuple[Address, Address], Amount] = {}

    def balance_of(self, holder: Address) -> Amount:
        return self._balances.get(holder)

    def total_supply(self) -> Amount:
        return self._balances.total()

    def credit(self, holder: Address, amount: Amount) -> None:
        """Create `amount` tokens for `holder` (genesis / faucet)."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative: {amount}")
        self._balances.add(holder, amount)

    def approve(self, owner: Address, spender: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> TransferResult:
        if amount < 0:
            return TransferResult.failure("negative amount")
        if self._balances.get(sender) < amount:
            return TransferResult.failure(
                f"insufficient balance: {sender} has {self._balances.get(sender)} < {amount}"
            )
        self._balances.move(sender, recipient, amount)
        self._run_hook(sender, recipient, amount)
        return TransferResult.success()

    def transfer_from(self, spender: Address, sender: Address, recipient: Address, amount: Amount) -> TransferResult:
        allowed = self.allowance(sender, spender)
        if allowed < amount:
            return TransferResult.failure(
                f"insufficient allowance: {spender} may move {allowed} < {amount} from {sender}"
            )
        result = self.transfer(sender, recipient, amount)
        if result.ok:
            self.approve(sender, spender, allowed - amount)
        return result

    def _run_hook(self, sender: Address, recipient: Address, amount: Amount) -> None:
        if self.after_transfer is None:
            return
        try:
            self.after_transfer(sender, recipient, amount)
        except Exception:
            logger.debug("%s: transfer hook raised; undoing %s -> %s (%s)", self.name, sender, recipient, amount)
            self._balances.move(recipient, sender, amount)
            raise

    def __repr__(self) -> str:
        return f"InMemoryTokenLedger({self.name!r}, {self._balances!r})"


class MintableTokenLedger(InMemoryTokenLedger):
    """In-memory ledger that also satisfies `RewardToken`."""

    def mint(self, recipient: Address, amount: Amount) -> TransferResult:
        if amount <= 0:
            return TransferResult.failure("mint amount must be positive")
        self._balances.add(recipient, amount)
        return TransferResult.success()
