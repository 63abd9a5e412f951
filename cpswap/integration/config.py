"""
Pool configuration.

Configuration is read from YAML (fail-closed: unknown keys and wrong types
are rejected) and then selectively overridden from the environment:

- `CPSWAP_OWNER`: privileged identity for administrative calls
- `CPSWAP_REWARD_RATE_BPS`: swap fee rate, clamped to [0, 10000]
- `CPSWAP_LOG_LEVEL`: logging level name for the CLI
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..core.pool import Pool
from .token_ledger import InMemoryTokenLedger, MintableTokenLedger

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised when a configuration document is malformed."""


@dataclass(frozen=True)
class PoolConfig:
    owner: str
    pool_address: str = "pool"
    token_a: str = "TKA"
    token_b: str = "TKB"
    reward_token: str = "RWD"
    reward_rate_bps: int = 30
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("owner", "pool_address", "token_a", "token_b", "reward_token"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v.strip():
                raise ConfigError(f"{name} must be a non-empty string")
        if len({self.token_a, self.token_b, self.reward_token}) != 3:
            raise ConfigError("token_a, token_b and reward_token must be distinct")
        if not isinstance(self.reward_rate_bps, int) or isinstance(self.reward_rate_bps, bool):
            raise ConfigError("reward_rate_bps must be an int")
        if not (0 <= self.reward_rate_bps <= 10_000):
            raise ConfigError(f"reward_rate_bps must be in [0, 10000]: {self.reward_rate_bps}")
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")


def _env_int(environ: Mapping[str, str], name: str, default: int, *, lo: int, hi: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        logger.warning("ignoring non-integer %s=%r", name, raw)
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(environ: Mapping[str, str], name: str, default: str) -> str:
    raw = environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _require_mapping(obj: Any, *, name: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def config_from_mapping(obj: Any) -> PoolConfig:
    data = _require_mapping(obj, name="pool config")
    known = set(PoolConfig.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown pool config keys: {', '.join(unknown)}")
    if "owner" not in data:
        raise ConfigError("pool config requires an owner")
    kwargs = dict(data)
    if isinstance(kwargs.get("log_level"), str):
        kwargs["log_level"] = kwargs["log_level"].strip().upper()
    return PoolConfig(**kwargs)


def apply_env_overrides(config: PoolConfig, environ: Optional[Mapping[str, str]] = None) -> PoolConfig:
    """Return `config` with any `CPSWAP_*` environment overrides applied."""
    env = os.environ if environ is None else environ
    return replace(
        config,
        owner=_env_str(env, "CPSWAP_OWNER", config.owner),
        reward_rate_bps=_env_int(env, "CPSWAP_REWARD_RATE_BPS", config.reward_rate_bps, lo=0, hi=10_000),
        log_level=_env_str(env, "CPSWAP_LOG_LEVEL", config.log_level).upper(),
    )


def load_config(path: Path, environ: Optional[Mapping[str, str]] = None) -> PoolConfig:
    """Load a pool config YAML document, then apply environment overrides."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if isinstance(obj, dict) and "pool" in obj:
        obj = obj["pool"]
    return apply_env_overrides(config_from_mapping(obj), environ)


@dataclass(frozen=True)
class PoolDeployment:
    pool: Pool
    token_a: InMemoryTokenLedger
    token_b: InMemoryTokenLedger
    reward_token: MintableTokenLedger


def build_pool(config: PoolConfig) -> PoolDeployment:
    """Create a pool wired to fresh in-memory ledgers named by `config`."""
    pool = Pool(owner=config.owner, address=config.pool_address, reward_rate_bps=config.reward_rate_bps)
    token_a = InMemoryTokenLedger(config.token_a)
    token_b = InMemoryTokenLedger(config.token_b)
    reward_token = MintableTokenLedger(config.reward_token)
    pool.admin.set_token_a(config.owner, token_a)
    pool.admin.set_token_b(config.owner, token_b)
    pool.admin.set_reward_token(config.owner, reward_token)
    logger.debug("built pool %s with reward_rate_bps=%s", config.pool_address, config.reward_rate_bps)
    return PoolDeployment(pool=pool, token_a=token_a, token_b=token_b, reward_token=reward_token)
