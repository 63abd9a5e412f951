#!/usr/bin/env python3
"""
Scenario runner for a single pool backed by in-memory token ledgers.

A scenario is a YAML document:

    pool:                       # PoolConfig fields
      owner: admin
      reward_rate_bps: 100
    accounts:                   # initial balances per account and token
      alice: {TKA: 10000, TKB: 10000}
    steps:
      - {op: add_liquidity, account: alice, amount_a: 1000, amount_b: 1000}
      - {op: swap, account: alice, amount_in: 100, direction: a_to_b, min_amount_out: 0}
      - {op: claim_rewards, account: alice}
      - {op: remove_liquidity, account: alice}

Each step's outcome and the final pool state are printed as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import yaml

from ..core.errors import PoolError
from ..core.types import Direction
from .config import ConfigError, PoolDeployment, apply_env_overrides, build_pool, config_from_mapping

logger = logging.getLogger(__name__)

MAX_ALLOWANCE = (1 << 256) - 1


class InvalidStep(ConfigError):
    """Raised when one step's arguments are malformed; reported per step."""

    code = "invalid_step"


def _int_arg(step: Mapping[str, Any], key: str, default: Optional[int] = None) -> int:
    v = step.get(key, default)
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidStep(f"step {step.get('op')!r}: {key} must be an int")
    if v < 0:
        raise InvalidStep(f"step {step.get('op')!r}: {key} must be non-negative: {v}")
    return v


def _direction_arg(step: Mapping[str, Any]) -> Direction:
    try:
        return Direction.parse(str(step.get("direction", "a_to_b")))
    except ValueError as exc:
        raise InvalidStep(f"step {step.get('op')!r}: {exc}") from exc


def _fund_accounts(dep: PoolDeployment, accounts: Mapping[str, Any]) -> None:
    ledgers = {dep.token_a.name: dep.token_a, dep.token_b.name: dep.token_b}
    for account, holdings in accounts.items():
        if not isinstance(holdings, dict):
            raise ConfigError(f"accounts.{account} must be a mapping of token -> amount")
        for token_name, amount in holdings.items():
            ledger = ledgers.get(token_name)
            if ledger is None:
                raise ConfigError(f"accounts.{account}: unknown token {token_name!r}")
            if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
                raise ConfigError(f"accounts.{account}.{token_name} must be a non-negative int")
            ledger.credit(account, amount)
        for ledger in ledgers.values():
            ledger.approve(account, dep.pool.address, MAX_ALLOWANCE)


def _dispatch(dep: PoolDeployment) -> Dict[str, Callable[[str, Mapping[str, Any]], Any]]:
    pool = dep.pool
    return {
        "add_liquidity": lambda who, s: pool.add_liquidity(who, _int_arg(s, "amount_a"), _int_arg(s, "amount_b")),
        "remove_liquidity": lambda who, s: list(pool.remove_liquidity(who)),
        "swap": lambda who, s: pool.swap(
            who,
            _int_arg(s, "amount_in"),
            _direction_arg(s),
            _int_arg(s, "min_amount_out", 0),
        ),
        "claim_rewards": lambda who, s: pool.claim_rewards(who),
        "set_reward_rate_bps": lambda who, s: pool.admin.set_reward_rate_bps(who, _int_arg(s, "value")),
        "quote": lambda who, s: pool.quote(_int_arg(s, "amount_in"), _direction_arg(s)),
    }


def _summary(dep: PoolDeployment) -> Dict[str, Any]:
    pool = dep.pool
    reserve_a, reserve_b = pool.reserves()
    return {
        "reserve_a": reserve_a,
        "reserve_b": reserve_b,
        "total_shares": pool.total_shares,
        "reward_rate_bps": pool.reward_rate_bps,
        "acc_reward_per_share": pool.acc_reward_per_share,
        "positions": {
            who: {"shares": p.shares, "pending_reward": pool.pending_rewards(who)}
            for who, p in pool.positions()
        },
        "reward_supply": dep.reward_token.total_supply(),
        "events": len(pool.events),
    }


def run_scenario(doc: Any, *, stop_on_error: bool = False, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Execute a parsed scenario document and return its JSON-able report."""
    if not isinstance(doc, dict):
        raise ConfigError("scenario must be a mapping")
    config = apply_env_overrides(config_from_mapping(doc.get("pool", {})), environ)
    dep = build_pool(config)
    _fund_accounts(dep, doc.get("accounts") or {})
    handlers = _dispatch(dep)

    raw_steps = doc.get("steps") or []
    if not isinstance(raw_steps, list):
        raise ConfigError("steps must be a list")

    results: List[Dict[str, Any]] = []
    for i, step in enumerate(raw_steps):
        if not isinstance(step, dict) or step.get("op") not in handlers:
            raise ConfigError(f"steps[{i}] must be a mapping with a known op")
        who = str(step.get("account", config.owner))
        try:
            out = handlers[step["op"]](who, step)
        except (PoolError, InvalidStep) as exc:
            logger.info("steps[%d] %s by %s rejected: %s", i, step["op"], who, exc)
            results.append({"op": step["op"], "account": who, "ok": False, "error": exc.code, "detail": str(exc)})
            if stop_on_error:
                break
            continue
        results.append({"op": step["op"], "account": who, "ok": True, "result": out})

    return {"steps": results, "pool": _summary(dep)}


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run a cpswap pool scenario against in-memory ledgers.")
    ap.add_argument("scenario", type=Path, help="Scenario YAML file")
    ap.add_argument("--stop-on-error", action="store_true", help="Stop at the first rejected step")
    ap.add_argument("--log-level", default=None, help="Override the configured log level")
    args = ap.parse_args(argv)

    try:
        doc = yaml.safe_load(args.scenario.read_text(encoding="utf-8"))
        pool_doc = doc.get("pool", {}) if isinstance(doc, dict) else {}
        level = args.log_level or apply_env_overrides(config_from_mapping(pool_doc)).log_level
        logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        report = run_scenario(doc, stop_on_error=args.stop_on_error)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        print(f"[cpswap] FAIL: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(report, indent=2, sort_keys=True))
    return 0 if all(r["ok"] for r in report["steps"]) else 1


if __name__ == "__main__":
    raise SystemExit(main())
