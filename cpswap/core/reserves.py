"""
Reserve ledger: the two pool balances and constant-product pricing.

Quotes are pure reads of the last committed reserves. Mutation happens only
through `apply_swap`, `deposit` and `withdraw`, which the pool calls after
every precondition has been checked; none of them re-validates slippage.
"""

from typing import Tuple

from ..kernels.python.cpmm_quote import quote_amount_out
from ..state.balances import Amount
from ..state.pool import PoolState
from .errors import InsufficientLiquidity
from .types import Direction


class ReserveLedger:
    def __init__(self, state: PoolState) -> None:
        self._state = state

    @staticmethod
    def quote(reserve_in: Amount, reserve_out: Amount, amount_in: Amount) -> Amount:
        """
        Output for selling `amount_in` into a pool holding (reserve_in, reserve_out).

            amount_out = floor(reserve_out * amount_in / (reserve_in + amount_in))

        Raises:
            InsufficientLiquidity: If either reserve is zero
        """
        if reserve_in == 0 or reserve_out == 0:
            raise InsufficientLiquidity(
                f"cannot quote against an empty reserve: ({reserve_in}, {reserve_out})"
            )
        return quote_amount_out(reserve_in=reserve_in, reserve_out=reserve_out, amount_in=amount_in)

    def reserves(self) -> Tuple[Amount, Amount]:
        return self._state.reserve_a, self._state.reserve_b

    def oriented(self, direction: Direction) -> Tuple[Amount, Amount]:
        """Return (reserve_in, reserve_out) for the given direction."""
        if direction is Direction.A_TO_B:
            return self._state.reserve_a, self._state.reserve_b
        return self._state.reserve_b, self._state.reserve_a

    def quote_for(self, amount_in: Amount, direction: Direction) -> Amount:
        reserve_in, reserve_out = self.oriented(direction)
        return self.quote(reserve_in, reserve_out, amount_in)

    def product(self) -> int:
        return self._state.product()

    def apply_swap(self, amount_in: Amount, amount_out: Amount, direction: Direction) -> None:
        """Credit the input reserve and debit the output reserve."""
        _, reserve_out = self.oriented(direction)
        if amount_out > reserve_out:
            raise ValueError(f"amount_out ({amount_out}) exceeds reserve_out ({reserve_out})")
        if direction is Direction.A_TO_B:
            self._state.reserve_a += amount_in
            self._state.reserve_b -= amount_out
        else:
            self._state.reserve_b += amount_in
            self._state.reserve_a -= amount_out

    def deposit(self, amount_a: Amount, amount_b: Amount) -> None:
        self._state.reserve_a += amount_a
        self._state.reserve_b += amount_b

    def withdraw(self, amount_a: Amount, amount_b: Amount) -> None:
        if amount_a > self._state.reserve_a or amount_b > self._state.reserve_b:
            raise ValueError(
                f"withdrawal ({amount_a}, {amount_b}) exceeds reserves {self.reserves()}"
            )
        self._state.reserve_a -= amount_a
        self._state.reserve_b -= amount_b
