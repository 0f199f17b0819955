"""
Stateful pool shell, asset transfers and configuration
"""

from .config import PoolConfig, PoolConfigError, apply_env_overrides, load_pool_config
from .local import LocalDeployment, deploy_local
from .pool import LiquidityPool
from .transfers import AssetTransfer, LedgerTransfers

__all__ = [
    "PoolConfig",
    "PoolConfigError",
    "apply_env_overrides",
    "load_pool_config",
    "LocalDeployment",
    "deploy_local",
    "LiquidityPool",
    "AssetTransfer",
    "LedgerTransfers",
]
