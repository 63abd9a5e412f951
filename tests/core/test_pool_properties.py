# [TESTER] v1
"""Property tests over random operation sequences.

Uses Hypothesis to drive swaps and deposits through a real pool and checks
the accounting rules after every step.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from cpswap.core import Direction, PoolError
from cpswap.core.invariants import check_all
from cpswap.integration.config import PoolConfig, PoolDeployment, build_pool

FUNDS = 10**15

amounts = st.integers(min_value=1, max_value=10**9)
swaps = st.lists(st.tuples(amounts, st.sampled_from(list(Direction))), max_size=20)


def _deploy(rate_bps: int) -> PoolDeployment:
    dep = build_pool(PoolConfig(owner="admin", reward_rate_bps=rate_bps))
    for who in ("p1", "p2", "trader"):
        for ledger in (dep.token_a, dep.token_b):
            ledger.credit(who, FUNDS)
            ledger.approve(who, dep.pool.address, 10**30)
    return dep


def _assert_consistent(dep: PoolDeployment) -> None:
    assert check_all(dep.pool.state) == []
    reserve_a, reserve_b = dep.pool.reserves()
    assert dep.token_a.balance_of(dep.pool.address) == reserve_a
    assert dep.token_b.balance_of(dep.pool.address) == reserve_b
    assert sum(p.shares for _, p in dep.pool.positions()) == dep.pool.total_shares


@settings(max_examples=60, deadline=None)
@given(a=amounts, b=amounts, ops=swaps, rate=st.integers(min_value=0, max_value=10_000))
def test_product_never_decreases_across_swaps(a: int, b: int, ops, rate: int) -> None:
    dep = _deploy(rate)
    dep.pool.add_liquidity("p1", a, b)
    for amount_in, direction in ops:
        before = dep.pool.state.product()
        acc_before = dep.pool.acc_reward_per_share
        dep.pool.swap("trader", amount_in, direction)
        assert dep.pool.state.product() >= before
        assert dep.pool.acc_reward_per_share >= acc_before
        _assert_consistent(dep)


@settings(max_examples=60, deadline=None)
@given(a=amounts, b=amounts, ops=swaps)
def test_sole_provider_round_trip_empties_pool(a: int, b: int, ops) -> None:
    dep = _deploy(30)
    dep.pool.add_liquidity("p1", a, b)
    for amount_in, direction in ops:
        dep.pool.swap("trader", amount_in, direction)
    out_a, out_b = dep.pool.remove_liquidity("p1")
    if not ops:
        assert out_a <= a and out_b <= b
    assert dep.pool.reserves() == (0, 0)
    assert dep.pool.total_shares == 0
    _assert_consistent(dep)


@settings(max_examples=60, deadline=None)
@given(a=amounts, b=amounts, ops=swaps)
def test_settlement_is_idempotent(a: int, b: int, ops) -> None:
    dep = _deploy(100)
    dep.pool.add_liquidity("p1", a, b)
    for amount_in, direction in ops:
        dep.pool.swap("trader", amount_in, direction)
    first = dep.pool.pending_rewards("p1")
    dep.pool.rewards.settle("p1")
    snapshot = dep.pool.position("p1")
    assert dep.pool.rewards.settle("p1") == 0
    assert dep.pool.position("p1") == snapshot
    assert snapshot.pending_reward == first


@settings(max_examples=60, deadline=None)
@given(deposits=st.lists(st.tuples(st.sampled_from(["p1", "p2"]), amounts, amounts), min_size=1, max_size=10))
def test_shares_are_conserved_across_deposits(deposits) -> None:
    dep = _deploy(0)
    for who, a, b in deposits:
        try:
            dep.pool.add_liquidity(who, a, b)
        except PoolError:
            pass
        _assert_consistent(dep)
