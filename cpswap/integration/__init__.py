"""
Integration layer: token ledger collaborators, configuration and the CLI.
"""

from .config import ConfigError, PoolConfig, PoolDeployment, build_pool, load_config
from .token_ledger import InMemoryTokenLedger, MintableTokenLedger, RewardToken, TokenLedger, TransferResult

__all__ = [
    "ConfigError",
    "PoolConfig",
    "PoolDeployment",
    "build_pool",
    "load_config",
    "InMemoryTokenLedger",
    "MintableTokenLedger",
    "RewardToken",
    "TokenLedger",
    "TransferResult",
]
