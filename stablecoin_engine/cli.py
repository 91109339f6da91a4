"""Command-line interface for the stablecoin engine simulator."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import load_config
from .logging_setup import configure_logging
from .oracles import PythPriceFeed
from .services import PositionSimulator
from .units import format_fixed, parse_allocation, to_fixed


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="stablecoin-engine",
        description="Over-collateralized stablecoin engine simulator",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("prices", help="Show current collateral prices")

    health_parser = sub.add_parser("health", help="Simulate a position's health factor")
    health_parser.add_argument(
        "--collateral",
        action="append",
        default=[],
        metavar="SYMBOL=AMOUNT",
        help="Collateral to deposit (repeatable)",
    )
    health_parser.add_argument(
        "--debt", default="0", help="Stablecoin amount to mint (default: 0)"
    )

    quote_parser = sub.add_parser("quote", help="Quote a liquidation payout")
    quote_parser.add_argument("symbol", help="Collateral asset to seize")
    quote_parser.add_argument("debt", help="Debt to cover")

    return parser


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    feed = PythPriceFeed(
        config.oracle.pyth, [c.price_feed for c in config.collateral]
    )
    simulator = PositionSimulator(config, feed)
    await simulator.refresh_prices()

    if args.command == "prices":
        for symbol, price, unit_value in simulator.price_table():
            print(f"{symbol}: ${format_fixed(unit_value, places=2)}  (publish_time {price.publish_time})")
    elif args.command == "health":
        collateral = dict(parse_allocation(item) for item in args.collateral)
        report = simulator.simulate(collateral, to_fixed(args.debt))
        print(simulator.format_report(report))
    elif args.command == "quote":
        quote = simulator.liquidation_quote(args.symbol, to_fixed(args.debt))
        print(simulator.format_quote(quote))
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
