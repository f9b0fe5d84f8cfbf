#!/usr/bin/env python3
"""
CLMM Simulator -- Concentrated Liquidity Position Simulator
===========================================================

Evaluate a liquidity range before committing capital, and check whether
moving to a new range later is worth the gas.

Usage:
  python run.py simulate  --price <p> --lower <a> --upper <b> --amount-x <x> --amount-y <y>
  python run.py simulate  --price <p> --range-pct 10 --amount-x <x> --volume <v> --tvl <t>
  python run.py curve     --price <p> --lower <a> --upper <b> --amount-x <x> --amount-y <y>
  python run.py rebalance --price <p> --old-lower <a> --old-upper <b> --new-range-pct 10 --value <usd>
  python run.py ticks     --price <p> [--tick-spacing 60]
  python run.py info                                            System overview

Sources:
  Uniswap V3 Whitepaper : https://uniswap.org/whitepaper-v3.pdf
  Cetus CLMM docs       : https://cetus-1.gitbook.io/cetus-docs/clmm/fees
"""

import sys
import argparse
import logging

from clmm_sim.central_config import PROJECT_VERSION, config
from clmm_sim.commands import (
    cmd_curve,
    cmd_info,
    cmd_rebalance,
    cmd_simulate,
    cmd_ticks,
    resolve_range,
)
from clmm_sim.errors import CLMMError
from clmm_sim.tick_math import get_tick_spacing


# ── CLI Parser ────────────────────────────────────────────────────────────


def _add_range_args(p: argparse.ArgumentParser, prefix: str = "") -> None:
    dash = f"--{prefix}-" if prefix else "--"
    label = f"{prefix} " if prefix else ""
    p.add_argument(f"{dash}lower", type=float, default=None, help=f"{label}range lower price")
    p.add_argument(f"{dash}upper", type=float, default=None, help=f"{label}range upper price")
    p.add_argument(
        f"{dash}range-pct",
        type=float,
        default=None,
        help=f"{label}range as ±percent around --price (instead of lower/upper)",
    )


def _add_pool_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--fee-rate",
        type=float,
        default=0.003,
        help="Pool fee tier as a fraction (default: 0.003 = 0.30%%)",
    )
    p.add_argument(
        "--volume", type=float, default=0.0, help="Pool 24h volume (default: 0 = unknown)"
    )
    p.add_argument(
        "--tvl", type=float, default=0.0, help="Pool TVL (default: 0 = unknown)"
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clmm-sim",
        description=f"CLMM Simulator v{PROJECT_VERSION} — Concentrated Liquidity Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py simulate --price 1 --lower 0.9 --upper 1.1 --amount-x 500 --amount-y 500
  python run.py simulate --price 2500 --range-pct 10 --amount-x 5000 --amount-y 2 \\
                         --volume 5e7 --tvl 2e8 --fee-rate 0.0005 --align
  python run.py curve    --price 1 --lower 0.9 --upper 1.1 --amount-x 0.5 --amount-y 0.5 --steps 20
  python run.py rebalance --price 1.3 --old-lower 0.9 --old-upper 1.1 \\
                          --new-range-pct 10 --value 1000 --volume 1e6 --tvl 5e6
  python run.py ticks    --price 1.25 --tick-spacing 60
  python run.py info

Prices are token X per 1 token Y; values are reported in token X units.
""",
    )
    parser.add_argument(
        "--version", action="version", version=f"CLMM Simulator v{PROJECT_VERSION}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    sim_p = sub.add_parser("simulate", help="Full position snapshot")
    sim_p.add_argument("--price", type=float, required=True, help="Current price")
    _add_range_args(sim_p)
    sim_p.add_argument("--amount-x", type=float, default=0.0, help="Token X deposit")
    sim_p.add_argument("--amount-y", type=float, default=0.0, help="Token Y deposit")
    _add_pool_args(sim_p)
    sim_p.add_argument(
        "--align",
        action="store_true",
        help="Snap range bounds to the fee tier's tick spacing",
    )

    curve_p = sub.add_parser("curve", help="Impermanent loss across price moves")
    curve_p.add_argument("--price", type=float, required=True, help="Current price")
    _add_range_args(curve_p)
    curve_p.add_argument("--amount-x", type=float, default=0.0, help="Token X deposit")
    curve_p.add_argument("--amount-y", type=float, default=0.0, help="Token Y deposit")
    curve_p.add_argument(
        "--min-pct",
        type=float,
        default=config.defaults.CURVE_MIN_PCT,
        help="Smallest price move in percent (default: -80)",
    )
    curve_p.add_argument(
        "--max-pct",
        type=float,
        default=config.defaults.CURVE_MAX_PCT,
        help="Largest price move in percent (default: 200)",
    )
    curve_p.add_argument(
        "--steps",
        type=int,
        default=config.defaults.CURVE_STEPS,
        help="Grid subdivisions (default: 50)",
    )

    reb_p = sub.add_parser("rebalance", help="Rebalance break-even analysis")
    reb_p.add_argument("--price", type=float, required=True, help="Current price")
    _add_range_args(reb_p, "old")
    _add_range_args(reb_p, "new")
    reb_p.add_argument("--value", type=float, required=True, help="Position value (USD)")
    _add_pool_args(reb_p)
    reb_p.add_argument(
        "--gas-per-tx",
        type=float,
        default=config.defaults.GAS_COST_PER_TX_USD,
        help="Gas cost per transaction in USD (default: 0.0125)",
    )

    ticks_p = sub.add_parser("ticks", help="Tick / price conversions")
    ticks_p.add_argument("--price", type=float, default=None, help="Price to convert")
    ticks_p.add_argument("--tick", type=int, default=None, help="Tick to convert")
    ticks_p.add_argument(
        "--tick-spacing", type=int, default=None, help="Tick spacing for alignment"
    )
    ticks_p.add_argument(
        "--range-pct",
        type=float,
        default=50,
        help="Width of the default range shown with --tick-spacing (default: 50)",
    )

    sub.add_parser("info", help="System information")

    return parser


# ── Main ──────────────────────────────────────────────────────────────────


def _dispatch(args: argparse.Namespace) -> None:
    if args.command == "info":
        cmd_info()
    elif args.command == "simulate":
        spacing = get_tick_spacing(args.fee_rate) if args.align else None
        price_range = resolve_range(
            args.price, args.lower, args.upper, args.range_pct, spacing
        )
        cmd_simulate(
            price=args.price,
            price_range=price_range,
            amount_x=args.amount_x,
            amount_y=args.amount_y,
            fee_rate=args.fee_rate,
            volume=args.volume,
            tvl=args.tvl,
        )
    elif args.command == "curve":
        price_range = resolve_range(args.price, args.lower, args.upper, args.range_pct)
        cmd_curve(
            price=args.price,
            price_range=price_range,
            amount_x=args.amount_x,
            amount_y=args.amount_y,
            min_pct=args.min_pct,
            max_pct=args.max_pct,
            steps=args.steps,
        )
    elif args.command == "rebalance":
        old_range = resolve_range(
            args.price, args.old_lower, args.old_upper, args.old_range_pct
        )
        new_range = resolve_range(
            args.price, args.new_lower, args.new_upper, args.new_range_pct
        )
        cmd_rebalance(
            price=args.price,
            old_range=old_range,
            new_range=new_range,
            value=args.value,
            volume=args.volume,
            fee_rate=args.fee_rate,
            tvl=args.tvl,
            gas_per_tx=args.gas_per_tx,
        )
    elif args.command == "ticks":
        cmd_ticks(
            price=args.price,
            tick=args.tick,
            tick_spacing=args.tick_spacing,
            range_pct=args.range_pct,
        )


def main(argv=None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        _dispatch(args)
    except CLMMError as exc:
        print(f"❌ {exc}")
        return 2
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n❌ Cancelled.")
        sys.exit(130)
