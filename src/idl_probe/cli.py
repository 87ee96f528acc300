"""Command line entry point for searching program accounts by field values.

Usage:
    idl-probe --rpc URL --idl perpetuals.json --program PROGRAM_ID -n Custody
    idl-probe ... -n Custody -p pricing.tradeImpactFeeScalar -k 1250000000000000
    idl-probe ... -n Custody -w "pool=5BUwFW4nRbftYTDMbgxykoFWqWHPzahFSNAaaaJtVKsq" -s decimals
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import httpx
from loguru import logger

from idl_probe.errors import IdlProbeError
from idl_probe.report import print_results, value_frequencies
from idl_probe.rpc import RpcError, RpcFetcher
from idl_probe.schema import SchemaIndex
from idl_probe.search import Constraint, ConstraintSearchEngine

RPC_URL_ENV = "IDL_PROBE_RPC_URL"


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        description="Search program accounts by account name and field values"
    )
    arg_parser.add_argument(
        "-r", "--rpc",
        default=os.environ.get(RPC_URL_ENV),
        help=f"RPC URL (default: ${RPC_URL_ENV})",
    )
    arg_parser.add_argument("-i", "--idl", type=Path, required=True, help="Path to the IDL JSON file")
    arg_parser.add_argument("-p", "--program", required=True, help="Program ID that owns the accounts")
    arg_parser.add_argument("-n", "--name", dest="account", required=True, help="Account name to search")
    arg_parser.add_argument(
        "--path",
        dest="paths",
        action="append",
        default=[],
        help="Field path in the account (repeatable, paired with --value)",
    )
    arg_parser.add_argument(
        "-k", "--value",
        dest="values",
        action="append",
        default=[],
        help="Value for the field path at the same position",
    )
    arg_parser.add_argument(
        "-w", "--where",
        action="append",
        default=[],
        help="Constraint as 'path=value' (repeatable, applied after --path/--value pairs)",
    )
    arg_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write all results to this JSON file when they exceed --limit",
    )
    arg_parser.add_argument("-s", "--interest", help="Field path whose values to tally across results")
    arg_parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Maximum number of accounts to display (default: 5)",
    )
    arg_parser.add_argument("--timeout", type=float, default=30.0, help="RPC timeout in seconds")
    arg_parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    return arg_parser


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format="{message}")


def collect_constraints(args: argparse.Namespace) -> list[Constraint]:
    """Combine --path/--value pairs and --where expressions, in that order."""
    if len(args.paths) != len(args.values):
        raise ValueError("The number of paths and values must match")
    constraints = [Constraint(p, v) for p, v in zip(args.paths, args.values)]
    constraints.extend(Constraint.parse(expr) for expr in args.where)
    return constraints


def main(argv: list[str] | None = None, fetcher: RpcFetcher | None = None) -> int:
    """Main entry point."""
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    if fetcher is None and not args.rpc:
        print(f"Error: --rpc is required when ${RPC_URL_ENV} is not set", file=sys.stderr)
        return 1

    try:
        constraints = collect_constraints(args)
        schema = SchemaIndex.from_file(args.idl)
        fetch = fetcher or RpcFetcher(args.rpc, timeout=args.timeout)
        with fetch:
            engine = ConstraintSearchEngine(schema, fetch, args.program)
            records = engine.search(args.account, constraints)

        print_results(records, args.output, args.limit, sys.stdout)

        if args.interest:
            print(f"Top 5 most common values for '{args.interest}':")
            for value, n in value_frequencies(records, schema, args.account, args.interest)[:5]:
                print(f"Value: {value}, Count: {n}")
    except (IdlProbeError, RpcError, httpx.HTTPError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
