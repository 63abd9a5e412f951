"""Observability records emitted by the pool.

Records are frozen dataclasses appended to an `EventLog` after an operation
has committed. Nothing in the pool reads them back.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Iterator, Union

from .types import Direction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiquidityAdded:
    provider: str
    amount_a: int
    amount_b: int
    shares: int


@dataclass(frozen=True)
class LiquidityRemoved:
    provider: str
    amount_a: int
    amount_b: int
    shares: int


@dataclass(frozen=True)
class Swapped:
    trader: str
    direction: Direction
    amount_in: int
    amount_out: int
    fee: int


@dataclass(frozen=True)
class RewardsClaimed:
    provider: str
    amount: int


@dataclass(frozen=True)
class RewardRateUpdated:
    old_bps: int
    new_bps: int


@dataclass(frozen=True)
class TokenConfigured:
    slot: str
    token: str


@dataclass(frozen=True)
class EmergencyWithdrawal:
    token: str
    recipient: str
    amount: int


@dataclass(frozen=True)
class OwnershipTransferred:
    previous_owner: str
    new_owner: str


Event = Union[
    LiquidityAdded,
    LiquidityRemoved,
    Swapped,
    RewardsClaimed,
    RewardRateUpdated,
    TokenConfigured,
    EmergencyWithdrawal,
    OwnershipTransferred,
]


def event_to_dict(event: Event) -> dict[str, Any]:
    out: dict[str, Any] = {"event": type(event).__name__}
    for key, value in asdict(event).items():
        out[key] = value.value if isinstance(value, Enum) else value
    return out


class EventLog:
    """Append-only list of committed events."""

    def __init__(self) -> None:
        self._events: list[Event] = []

    def emit(self, event: Event) -> None:
        self._events.append(event)
        logger.info("%s %s", type(event).__name__, event_to_dict(event))

    def of_type(self, kind: type) -> list[Event]:
        return [e for e in self._events if isinstance(e, kind)]

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)
