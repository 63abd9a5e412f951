# [TESTER] v1

from __future__ import annotations

import threading

import pytest

from cpswap.core.errors import ReentrancyDetected
from cpswap.core.guard import TransactionGuard, guarded
from cpswap.core.types import GuardState


class _Counter:
    def __init__(self) -> None:
        self._guard = TransactionGuard()
        self.calls = 0

    @guarded
    def bump(self, nested: bool = False) -> int:
        self.calls += 1
        if nested:
            self.bump()
        return self.calls


def test_guard_idle_after_success_and_failure() -> None:
    g = TransactionGuard()
    with g.entered("op"):
        assert g.state is GuardState.IN_PROGRESS
        assert g.active_operation == "op"
    assert g.state is GuardState.IDLE

    with pytest.raises(RuntimeError):
        with g.entered("op"):
            raise RuntimeError("boom")
    assert g.state is GuardState.IDLE
    assert g.active_operation is None


def test_nested_entry_same_thread_rejected() -> None:
    c = _Counter()
    with pytest.raises(ReentrancyDetected):
        c.bump(nested=True)
    assert c._guard.state is GuardState.IDLE
    assert c.bump() == 2


def test_other_threads_wait_instead_of_failing() -> None:
    g = TransactionGuard()
    order: list[str] = []
    inside = threading.Event()
    release = threading.Event()

    def first() -> None:
        with g.entered("first"):
            inside.set()
            release.wait(timeout=5)
            order.append("first")

    def second() -> None:
        inside.wait(timeout=5)
        with g.entered("second"):
            order.append("second")

    t1 = threading.Thread(target=first)
    t2 = threading.Thread(target=second)
    t1.start()
    t2.start()
    inside.wait(timeout=5)
    release.set()
    t1.join(timeout=5)
    t2.join(timeout=5)
    assert order == ["first", "second"]
