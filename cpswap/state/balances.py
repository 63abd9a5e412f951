"""
Single-token balance tracking.

Implements BalanceTable[Address] -> Amount for one fungible token.
"""

from typing import Dict, Tuple


# Type aliases
Address = str  # opaque holder identity (account name, hex address, ...)
Amount = int  # Non-negative integer (arbitrary precision)


class BalanceTable:
    """
    Balance table mapping holder -> amount for a single token.

    Note: zero balances are dropped, so the table stays sparse and iteration
    only ever sees funded holders.
    """

    def __init__(self):
        """Initialize empty balance table."""
        self._balances: Dict[Address, Amount] = {}

    def get(self, holder: Address) -> Amount:
        """Get balance for holder. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def set(self, holder: Address, amount: Amount) -> None:
        """
        Set balance for holder.

        Args:
            holder: Holder address
            amount: Non-negative amount

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def add(self, holder: Address, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(holder)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, new_balance)

    def subtract(self, holder: Address, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, -delta)

    def move(self, sender: Address, recipient: Address, amount: Amount) -> None:
        """Move `amount` from sender to recipient; both legs or neither."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative: {amount}")
        if self.get(sender) < amount:
            raise ValueError(f"Insufficient balance: {self.get(sender)} < {amount}")
        self.subtract(sender, amount)
        self.add(recipient, amount)

    def total(self) -> Amount:
        """Sum of all balances."""
        return sum(self._balances.values())

    def items(self) -> Tuple[Tuple[Address, Amount], ...]:
        """Balances sorted by holder."""
        return tuple(sorted(self._balances.items()))

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
