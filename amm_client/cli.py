#!/usr/bin/env python3
"""
Read-only command-line interface for the AMM client.

Usage:
    amm-client pools
    amm-client pool WBCX TEST --fee 500
    amm-client quote WBCX TEST 1.5 --slippage 0.5
    amm-client positions 0xYourAddress
    amm-client position 42 --volume 1000
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .client import AmmClient
from .config.base import configure_logging
from .config.manager import load_config
from .errors import AmmClientError

logger = logging.getLogger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


async def run_pools(client: AmmClient, args) -> bool:
    pools = await client.pools.get_all_pools()
    if args.json:
        _print_json([p.to_dict() for p in pools])
        return True

    logger.info("=" * 60)
    logger.info(f"📊 {len(pools)} POOLS")
    logger.info("=" * 60)
    for pool in pools:
        logger.info(
            f"{pool.token0.symbol}/{pool.token1.symbol} {pool.fee / 10000:.2f}% "
            f"@ {pool.price:.6g} (tick {pool.tick}, liquidity {pool.liquidity}) {pool.address}"
        )
    return True


async def run_pool(client: AmmClient, args) -> bool:
    fee = args.fee if args.fee is not None else client.settings.DEFAULT_SWAP_FEE
    pool = await client.pools.get_pool_details(args.token_a, args.token_b, fee)
    if pool is None:
        logger.warning(f"⚠️ No pool for {args.token_a}/{args.token_b} at fee {fee}")
        return False
    _print_json(pool.to_dict())
    return True


async def run_quote(client: AmmClient, args) -> bool:
    quote = await client.quotes.get_quote(
        args.token_in, args.token_out, args.amount, slippage=args.slippage, fee=args.fee
    )
    _print_json(quote.to_dict())
    if quote.price_impact_is_estimate:
        logger.info("ℹ️ Price impact is a placeholder estimate")
    return True


async def run_positions(client: AmmClient, args) -> bool:
    positions = await client.positions.get_positions(args.owner)
    rows: List[Dict[str, Any]] = []
    for position in positions:
        details = await client.positions.get_position_details(position.token_id)
        if details is not None:
            rows.append(details.to_dict())
        else:
            rows.append({"token_id": position.token_id, "error": "pool state unavailable"})
    _print_json(rows)
    return True


async def run_position(client: AmmClient, args) -> bool:
    details = await client.positions.get_position_details(args.token_id, volume_24h=args.volume)
    if details is None:
        logger.error(f"❌ Could not load pool state for position {args.token_id}")
        return False
    _print_json(details.to_dict())
    return True


COMMANDS = {
    "pools": run_pools,
    "pool": run_pool,
    "quote": run_quote,
    "positions": run_positions,
    "position": run_position,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amm-client",
        description="Inspect pools, quotes and positions on the AMM (read-only)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List every pool among the configured tokens
  amm-client pools

  # Pool state for a pair
  amm-client pool WBCX TEST --fee 500

  # Quote 1.5 WBCX into TEST with 1% slippage
  amm-client quote WBCX TEST 1.5 --slippage 1

  # Positions of an owner, with derived economics
  amm-client positions 0x0000000000000000000000000000000000000001
        """,
    )
    parser.add_argument("--env", help="Override ENVIRONMENT (local, dev, staging, production, test)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pools = subparsers.add_parser("pools", help="Enumerate existing pools")
    pools.add_argument("--json", action="store_true", help="Print JSON instead of a summary")

    pool = subparsers.add_parser("pool", help="Show one pool's state")
    pool.add_argument("token_a")
    pool.add_argument("token_b")
    pool.add_argument("--fee", type=int, help="Fee tier (default: configured swap fee)")

    quote = subparsers.add_parser("quote", help="Quote an exact-input swap")
    quote.add_argument("token_in")
    quote.add_argument("token_out")
    quote.add_argument("amount", help="Input amount as a decimal string")
    quote.add_argument("--slippage", type=float, help="Slippage tolerance in percent")
    quote.add_argument("--fee", type=int, help="Fee tier")

    positions = subparsers.add_parser("positions", help="List an owner's positions")
    positions.add_argument("owner")

    position = subparsers.add_parser("position", help="Show one position")
    position.add_argument("token_id", type=int)
    position.add_argument("--volume", type=float, help="24h pool volume in token1 units for the APR estimate")

    return parser


async def run(argv: Optional[List[str]] = None, client: Optional[AmmClient] = None) -> int:
    """Parse arguments, run the command and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    owned = client is None
    try:
        if owned:
            client = AmmClient.from_config(load_config(args.env))
        success = await COMMANDS[args.command](client, args)
        return 0 if success else 1
    except AmmClientError as e:
        logger.error(f"❌ {type(e).__name__}: {e}")
        return 1
    finally:
        if owned and client is not None:
            await client.disconnect()


def main():
    """Console script entry point."""
    configure_logging()
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        logger.info("⏹️  Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
