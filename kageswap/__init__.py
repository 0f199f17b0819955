"""
kageswap: constant-product ETH/0KAGE liquidity pool.
"""

from .integration import LiquidityPool, PoolConfig, deploy_local, load_pool_config

__version__ = "0.1.0"

__all__ = [
    "LiquidityPool",
    "PoolConfig",
    "deploy_local",
    "load_pool_config",
    "__version__",
]
