# [TESTER] v1
"""End-to-end pool scenarios against in-memory token ledgers."""

from __future__ import annotations

import pytest

from cpswap.core import (
    ArithmeticOverflow,
    Direction,
    GuardState,
    InsufficientLiquidity,
    InvalidConfiguration,
    LiquidityAdded,
    LiquidityRemoved,
    NoPosition,
    NothingToClaim,
    Pool,
    RewardsClaimed,
    SlippageExceeded,
    Swapped,
    ZeroAmount,
    ZeroSharesMinted,
)
from cpswap.core.rewards import SCALE
from cpswap.integration.config import PoolConfig, PoolDeployment, build_pool
from cpswap.kernels.python.cpmm_quote import MAX_UINT256

FUNDS = 10**9


def _deploy(rate_bps: int = 100, funded: tuple[str, ...] = ("p1", "p2", "trader")) -> PoolDeployment:
    dep = build_pool(PoolConfig(owner="admin", reward_rate_bps=rate_bps))
    for who in funded:
        for ledger in (dep.token_a, dep.token_b):
            ledger.credit(who, FUNDS)
            ledger.approve(who, dep.pool.address, 10**30)
    return dep


def _assert_backed(dep: PoolDeployment) -> None:
    reserve_a, reserve_b = dep.pool.reserves()
    assert dep.token_a.balance_of(dep.pool.address) == reserve_a
    assert dep.token_b.balance_of(dep.pool.address) == reserve_b


# ---------------------------------------------------------------------------
# Liquidity
# ---------------------------------------------------------------------------


def test_first_deposit_into_empty_pool() -> None:
    dep = _deploy()
    assert dep.pool.add_liquidity("p1", 100, 100) == 100
    assert dep.pool.reserves() == (100, 100)
    assert dep.pool.total_shares == 100
    assert dep.pool.position("p1").shares == 100
    assert dep.token_a.balance_of("p1") == FUNDS - 100
    _assert_backed(dep)


def test_second_provider_gets_proportional_shares() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 100, 100)
    assert dep.pool.add_liquidity("p2", 50, 50) == 50
    assert dep.pool.total_shares == 150
    assert dep.pool.events.of_type(LiquidityAdded)[-1] == LiquidityAdded(
        provider="p2", amount_a=50, amount_b=50, shares=50
    )


def test_remove_pays_pro_rata_and_prunes() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 100, 100)
    dep.pool.add_liquidity("p2", 50, 50)
    assert dep.pool.remove_liquidity("p2") == (50, 50)
    assert dep.token_a.balance_of("p2") == FUNDS
    assert dep.pool.position("p2").shares == 0
    assert [who for who, _ in dep.pool.positions()] == ["p1"]
    assert dep.pool.events.of_type(LiquidityRemoved)[-1].shares == 50
    _assert_backed(dep)


def test_remove_without_shares_raises_no_position() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 100, 100)
    n_events = len(dep.pool.events)
    with pytest.raises(NoPosition):
        dep.pool.remove_liquidity("p2")
    assert dep.pool.reserves() == (100, 100)
    assert len(dep.pool.events) == n_events


def test_add_zero_amount_rejected() -> None:
    dep = _deploy()
    with pytest.raises(ZeroAmount):
        dep.pool.add_liquidity("p1", 0, 100)
    assert dep.pool.total_shares == 0


def test_dust_deposit_rejected_without_transfer() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 10**6, 1)
    with pytest.raises(ZeroSharesMinted):
        dep.pool.add_liquidity("p2", 1, 1)
    assert dep.token_a.balance_of("p2") == FUNDS


def test_overflowing_amount_rejected() -> None:
    dep = _deploy()
    with pytest.raises(ArithmeticOverflow):
        dep.pool.add_liquidity("p1", MAX_UINT256 + 1, 1)


def test_reserve_overflow_rolls_back() -> None:
    dep = _deploy()
    for ledger in (dep.token_a, dep.token_b):
        ledger.credit("whale", MAX_UINT256)
        ledger.approve("whale", dep.pool.address, MAX_UINT256)
    dep.pool.add_liquidity("whale", MAX_UINT256, MAX_UINT256)
    with pytest.raises(ArithmeticOverflow):
        dep.pool.add_liquidity("p1", 1, 1)
    assert dep.pool.reserves() == (MAX_UINT256, MAX_UINT256)
    assert dep.token_a.balance_of("p1") == FUNDS
    assert "p1" not in dict(dep.pool.positions())


# ---------------------------------------------------------------------------
# Swaps
# ---------------------------------------------------------------------------


def test_swap_prices_and_accrues_fee() -> None:
    dep = _deploy(rate_bps=100)
    dep.pool.add_liquidity("p1", 1000, 1000)
    assert dep.pool.quote(100, Direction.A_TO_B) == 90

    assert dep.pool.swap("trader", 100, Direction.A_TO_B, 0) == 90
    assert dep.pool.reserves() == (1100, 910)
    assert dep.pool.acc_reward_per_share == SCALE // 1000
    assert dep.token_b.balance_of("trader") == FUNDS + 90
    assert dep.pool.events.of_type(Swapped)[-1] == Swapped(
        trader="trader", direction=Direction.A_TO_B, amount_in=100, amount_out=90, fee=1
    )
    _assert_backed(dep)


def test_slippage_rejection_leaves_pool_untouched() -> None:
    dep = _deploy(rate_bps=100)
    dep.pool.add_liquidity("p1", 1000, 1000)
    dep.pool.swap("trader", 100, Direction.A_TO_B, 0)
    acc = dep.pool.acc_reward_per_share

    with pytest.raises(SlippageExceeded) as excinfo:
        dep.pool.swap("trader", 100, Direction.A_TO_B, 95)
    assert excinfo.value.amount_out == 75
    assert dep.pool.reserves() == (1100, 910)
    assert dep.pool.acc_reward_per_share == acc
    assert dep.token_a.balance_of("trader") == FUNDS - 100
    assert dep.pool.guard_state is GuardState.IDLE


def test_swap_b_to_a() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 1000, 4000)
    out = dep.pool.swap("trader", 400, Direction.B_TO_A)
    assert out == 1000 * 400 // 4400
    assert dep.pool.reserves() == (1000 - out, 4400)
    _assert_backed(dep)


def test_swap_against_empty_pool() -> None:
    dep = _deploy()
    with pytest.raises(InsufficientLiquidity):
        dep.pool.swap("trader", 1, Direction.A_TO_B)


def test_swap_zero_input_rejected() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 1000, 1000)
    with pytest.raises(ZeroAmount):
        dep.pool.swap("trader", 0, Direction.A_TO_B)


def test_swap_with_zero_output_is_allowed() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 1000, 1)
    assert dep.pool.swap("trader", 1, Direction.A_TO_B) == 0
    assert dep.pool.reserves() == (1001, 1)
    _assert_backed(dep)


def test_swap_requires_direction_enum() -> None:
    dep = _deploy()
    dep.pool.add_liquidity("p1", 1000, 1000)
    with pytest.raises(TypeError):
        dep.pool.swap("trader", 10, "a_to_b")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------


def test_claim_mints_reward_token() -> None:
    dep = _deploy(rate_bps=100)
    dep.pool.add_liquidity("p1", 1000, 1000)
    dep.pool.swap("trader", 1000, Direction.A_TO_B)
    assert dep.pool.pending_rewards("p1") == 10
    assert dep.pool.claim_rewards("p1") == 10
    assert dep.reward_token.balance_of("p1") == 10
    assert dep.pool.events.of_type(RewardsClaimed) == [RewardsClaimed(provider="p1", amount=10)]
    with pytest.raises(NothingToClaim):
        dep.pool.claim_rewards("p1")


def test_reward_survives_removal() -> None:
    dep = _deploy(rate_bps=100)
    dep.pool.add_liquidity("p1", 1000, 1000)
    dep.pool.swap("trader", 1000, Direction.A_TO_B)
    dep.pool.remove_liquidity("p1")
    assert dep.pool.total_shares == 0
    assert dep.pool.pending_rewards("p1") == 10
    assert dep.pool.claim_rewards("p1") == 10
    assert list(dep.pool.positions()) == []


def test_claim_with_nothing_pending() -> None:
    dep = _deploy()
    with pytest.raises(NothingToClaim):
        dep.pool.claim_rewards("p1")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def test_unconfigured_pool_rejects_operations() -> None:
    pool = Pool(owner="admin")
    with pytest.raises(InvalidConfiguration):
        pool.add_liquidity("p1", 1, 1)
    with pytest.raises(InvalidConfiguration):
        pool.swap("p1", 1, Direction.A_TO_B)
    with pytest.raises(InvalidConfiguration):
        pool.claim_rewards("p1")
    assert pool.guard_state is GuardState.IDLE
