"""Command-line interface for the yield aggregator."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .amounts import format_amount
from .config import load_config
from .errors import AggregatorError
from .logging_setup import configure_logging
from .models import Action
from .services import Aggregator

DEMO_ACCOUNT = "0x1234...ABCD"


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="yield-aggregator",
        description="Simulated cross-chain lending rate aggregator",
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

    rates_parser = sub.add_parser("rates", help="Show rates and best quotes")
    rates_parser.add_argument("--asset", default=None, help="Only show this asset")

    open_parser = sub.add_parser("open", help="Open a simulated position")
    open_parser.add_argument("asset")
    open_parser.add_argument("amount")
    open_parser.add_argument("action", choices=[a.value for a in Action])
    open_parser.add_argument(
        "--ticks", type=int, default=0, help="Simulator ticks to run afterwards"
    )
    open_parser.add_argument(
        "--optimize", action="store_true", help="Reoptimize after the ticks"
    )

    bridge_parser = sub.add_parser("bridge", help="Validate a bridge request")
    bridge_parser.add_argument("source")
    bridge_parser.add_argument("destination")
    bridge_parser.add_argument("asset")
    bridge_parser.add_argument("amount")

    simulate_parser = sub.add_parser("simulate", help="Run the rate simulator")
    simulate_parser.add_argument(
        "interval",
        nargs="?",
        type=float,
        default=None,
        help="Tick interval in seconds (overrides config)",
    )

    return parser


def _print_rates(aggregator: Aggregator, asset: str | None = None) -> None:
    rates = aggregator.rates
    assets = [asset] if asset else list(rates)
    for name in assets:
        print(f"{name}")
        for chain, protocols in rates.get(name, {}).items():
            for protocol, rate in protocols.items():
                print(f"  {chain:<10} {protocol:<14} {format_amount(rate):>7}%")
        for action in Action:
            quote = aggregator.best_rate(name, action)
            if quote is None:
                print(f"  best {action.value}: none")
            else:
                print(
                    f"  best {action.value}: {format_amount(quote.rate)}% "
                    f"on {quote.protocol} ({quote.chain})"
                )


def _print_positions(aggregator: Aggregator) -> None:
    print("Positions:")
    for p in aggregator.positions:
        status = "Optimal" if p.is_optimal else "Not Optimal"
        print(
            f"  {p.action.value:<7} {format_amount(p.amount):>12} {p.asset:<5} "
            f"{p.protocol:<14} {p.chain:<10} {format_amount(p.rate):>6}%  {status}"
        )
    print(
        f"Rewards earned: {format_amount(aggregator.rewards_total)} "
        f"{aggregator.reward_token}"
    )


def _print_notifications(aggregator: Aggregator) -> None:
    print("Notifications:")
    for n in aggregator.notifications:
        print(f"  [{n.timestamp:%H:%M:%S}] {n.title}: {n.description}")


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    aggregator = Aggregator(config)

    if args.command == "rates":
        _print_rates(aggregator, args.asset)
        return 0

    if args.command == "simulate":
        await aggregator.run_continuous(args.interval)
        return 0

    await aggregator.connect_wallet(DEMO_ACCOUNT)

    if args.command == "open":
        try:
            await aggregator.open_position(args.asset, args.amount, args.action)
        except AggregatorError as e:
            print(f"Rejected: {e}")
            return 1
        await aggregator.run_ticks(args.ticks)
        if args.optimize:
            await aggregator.optimize()
        _print_positions(aggregator)
        _print_notifications(aggregator)
        return 0

    if args.command == "bridge":
        try:
            await aggregator.bridge(args.source, args.destination, args.asset, args.amount)
        except AggregatorError as e:
            print(f"Rejected: {e}")
            return 1
        print(aggregator.notifications[0].description)
        return 0

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
