"""
Pool configuration.

A pool's fee is fixed at construction; everything else here is metadata the
shell and tooling need (symbols, decimals, the pool's own address).

Sources, lowest to highest precedence:
- dataclass defaults (997/1000, ETH/0KAGE, 18 decimals),
- a YAML file (``config/pool.yaml`` layout, loaded with ``yaml.safe_load``),
- environment overrides ``KAGESWAP_FEE_NUMERATOR``, ``KAGESWAP_FEE_DENOMINATOR``,
  ``KAGESWAP_POOL_ADDRESS``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from ..core.cpmm import DEFAULT_FEE_DENOMINATOR, DEFAULT_FEE_NUMERATOR, validate_fee
from ..core.errors import AmountOverflow

logger = logging.getLogger(__name__)

DEFAULT_POOL_ADDRESS = "0x" + "d3" * 20
DEFAULT_TOKEN_ADDRESS = "0x" + "0c" * 20


class PoolConfigError(ValueError):
    """Raised for an invalid fee fraction or a malformed config source."""


@dataclass(frozen=True)
class PoolConfig:
    fee_numerator: int = DEFAULT_FEE_NUMERATOR
    fee_denominator: int = DEFAULT_FEE_DENOMINATOR

    base_symbol: str = "ETH"
    token_symbol: str = "0KAGE"
    token_name: str = "Zero Kage"
    token_decimals: int = 18

    pool_address: str = DEFAULT_POOL_ADDRESS
    token_address: str = DEFAULT_TOKEN_ADDRESS

    def __post_init__(self) -> None:
        for name in ("fee_numerator", "fee_denominator", "token_decimals"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise PoolConfigError(f"{name} must be an int, got {type(v).__name__}")
        try:
            validate_fee(self.fee_numerator, self.fee_denominator)
        except (ValueError, AmountOverflow) as exc:
            raise PoolConfigError(f"invalid fee rate: {exc}") from exc
        if self.pool_address == self.token_address:
            raise PoolConfigError("pool_address and token_address must differ")
        if self.token_decimals < 0:
            raise PoolConfigError(f"token_decimals must be non-negative: {self.token_decimals}")
        for name in ("base_symbol", "token_symbol", "token_name", "pool_address", "token_address"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v.strip():
                raise PoolConfigError(f"{name} must be a non-empty string")

    @property
    def fee_rate(self) -> tuple[int, int]:
        return self.fee_numerator, self.fee_denominator

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PoolConfig":
        """Build a config from a mapping; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise PoolConfigError(f"unknown pool config keys: {', '.join(unknown)}")
        return cls(**dict(data))


def _int_env(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise PoolConfigError(f"{name} must be an integer, got {raw!r}") from exc


def apply_env_overrides(config: PoolConfig, env: Optional[Mapping[str, str]] = None) -> PoolConfig:
    env = os.environ if env is None else env
    overrides: dict[str, Any] = {}
    fee_num = _int_env(env, "KAGESWAP_FEE_NUMERATOR")
    if fee_num is not None:
        overrides["fee_numerator"] = fee_num
    fee_den = _int_env(env, "KAGESWAP_FEE_DENOMINATOR")
    if fee_den is not None:
        overrides["fee_denominator"] = fee_den
    address = env.get("KAGESWAP_POOL_ADDRESS", "").strip()
    if address:
        overrides["pool_address"] = address
    if not overrides:
        return config
    logger.debug("pool config env overrides: %s", sorted(overrides))
    return replace(config, **overrides)


def load_pool_config(
    path: Optional[Union[str, Path]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> PoolConfig:
    """
    Load a ``PoolConfig`` from YAML (optional) and apply environment overrides.

    The YAML document is either the config mapping itself or a mapping with a
    top-level ``pool`` key.
    """
    config = PoolConfig()
    if path is not None:
        p = Path(path)
        try:
            obj = yaml.safe_load(p.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise PoolConfigError(f"invalid YAML in {p}: {exc}") from exc
        if obj is None:
            obj = {}
        if not isinstance(obj, Mapping):
            raise PoolConfigError(f"pool config in {p} must be a mapping")
        if "pool" in obj:
            obj = obj["pool"]
            if not isinstance(obj, Mapping):
                raise PoolConfigError(f"'pool' section in {p} must be a mapping")
        config = PoolConfig.from_mapping(obj)
        logger.info("loaded pool config from %s (fee %d/%d)", p, config.fee_numerator, config.fee_denominator)
    return apply_env_overrides(config, env)
