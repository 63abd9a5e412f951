"""Shared enums for the pool components."""

from __future__ import annotations

from enum import Enum, unique


@unique
class Direction(Enum):
    """Which asset is sold into the pool."""
    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"

    @classmethod
    def parse(cls, raw: str) -> "Direction":
        """Accept `a_to_b` / `b_to_a` in any case (CLI and config input)."""
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise ValueError(f"unknown direction: {raw!r}") from None


@unique
class GuardState(Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
