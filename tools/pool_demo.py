#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kageswap.core.errors import PoolError
from kageswap.core.units import format_units, parse_units
from kageswap.integration import deploy_local, load_pool_config


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Replay a local ETH/0KAGE pool session.")
    ap.add_argument("--config", type=Path, default=ROOT / "config" / "pool.yaml")
    ap.add_argument("--token", default="100", help="0KAGE seeded at initialize")
    ap.add_argument("--base", default="10", help="ETH seeded at initialize")
    ap.add_argument("--swap", default="1", help="ETH swapped for 0KAGE")
    ap.add_argument("--deposit", default="1", help="ETH deposited after the swap")
    ap.add_argument("--withdraw-pct", type=int, default=50, help="share of the deployer's LP tokens to redeem")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not 0 < args.withdraw_pct <= 100:
        print(f"[pool-demo] FAIL: --withdraw-pct must be in 1..100, got {args.withdraw_pct}")
        return 2

    config = load_pool_config(args.config if args.config.exists() else None)
    deployer = "0x" + "de" * 20
    d = deploy_local(deployer, config, base_balances={deployer: parse_units("1000")})
    pool = d.pool
    dec = config.token_decimals

    def show(label: str) -> None:
        print(
            f"[pool-demo] {label}: reserves={format_units(pool.reserve_base)} {config.base_symbol} / "
            f"{format_units(pool.reserve_token, dec)} {config.token_symbol} shares={pool.total_shares}"
        )

    try:
        token_in = parse_units(args.token, dec)
        d.approve_pool(deployer, token_in)
        pool.initialize(deployer, token_in, parse_units(args.base))
        show("initialize")

        quoted = pool.quote_base_for_token(parse_units(args.swap))
        ev = pool.swap_base_for_token(deployer, parse_units(args.swap))
        assert ev.token_out == quoted
        print(f"[pool-demo] swap: {args.swap} {config.base_symbol} -> {format_units(ev.token_out, dec)} {config.token_symbol}")
        show("after swap")

        dq = pool.quote_deposit(parse_units(args.deposit))
        d.approve_pool(deployer, dq.token_required)
        added = pool.deposit(deployer, parse_units(args.deposit))
        print(f"[pool-demo] deposit: minted {added.shares_minted} shares for {format_units(added.token_in, dec)} {config.token_symbol}")
        show("after deposit")

        shares = pool.shares_of(deployer) * args.withdraw_pct // 100
        removed = pool.withdraw(deployer, shares)
        print(
            f"[pool-demo] withdraw: {removed.shares_redeemed} shares -> {format_units(removed.base_out)} "
            f"{config.base_symbol} + {format_units(removed.token_out, dec)} {config.token_symbol}"
        )
        show("after withdraw")
    except PoolError as exc:
        print(f"[pool-demo] FAIL ({exc.code}): {exc}")
        return 1

    print(f"[pool-demo] events: {', '.join(e.name for e in pool.events)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
