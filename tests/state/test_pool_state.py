# [TESTER] v1

from __future__ import annotations

import pytest

from cpswap.state.pool import PoolState


def test_defaults_are_empty_pool() -> None:
    s = PoolState()
    assert (s.reserve_a, s.reserve_b, s.total_shares) == (0, 0, 0)
    assert s.acc_reward_per_share == 0
    assert len(s.positions) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"reward_rate_bps": 10_001},
        {"reward_rate_bps": -1},
        {"reserve_a": -1},
        {"total_shares": -1},
        {"acc_reward_per_share": -1},
    ],
)
def test_out_of_range_fields_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        PoolState(**kwargs)


def test_restore_undoes_every_field() -> None:
    s = PoolState(reserve_a=10, reserve_b=20, total_shares=14, reward_rate_bps=30, acc_reward_per_share=7)
    s.positions.get_or_create("alice").shares = 14
    snap = s.snapshot()

    s.reserve_a = 0
    s.reward_rate_bps = 0
    s.acc_reward_per_share = 99
    s.positions.get_or_create("alice").shares = 0
    s.positions.get_or_create("bob").shares = 3

    s.restore(snap)
    assert (s.reserve_a, s.reserve_b, s.total_shares) == (10, 20, 14)
    assert (s.reward_rate_bps, s.acc_reward_per_share) == (30, 7)
    assert s.positions.get("alice").shares == 14
    assert "bob" not in s.positions


def test_restore_does_not_alias_snapshot() -> None:
    s = PoolState()
    snap = s.snapshot()
    s.restore(snap)
    s.positions.get_or_create("alice").shares = 1
    assert "alice" not in snap.positions


def test_product() -> None:
    assert PoolState(reserve_a=3, reserve_b=7, total_shares=4).product() == 21
