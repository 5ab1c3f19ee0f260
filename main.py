"""
Polymath client command line.

Commands:
    copyartifacts   Trim build artifacts into the runtime artifact directory
    check           Validate config, connect and bind the platform contracts

Usage:
    polymath copyartifacts --build-dir build/contracts
    polymath check --rpc-url http://localhost:8545
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from config.loader import get_config
from config.validate import ConfigValidationError, validate_all_configs
from poly_logging.logger_manager import setup_module_logger
from shared.constants import PLATFORM_ARTIFACTS
from shared.errors import MissingArtifactError, PolymathError

_logger = setup_module_logger("cli", "cli.log", module_folder="CLI_Logs", console=True)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_copy_artifacts(args: argparse.Namespace) -> int:
    from config.artifacts import copy_artifacts

    dest = Path(args.dest) if args.dest else get_config().get_artifacts_dir()
    names = args.names or list(PLATFORM_ARTIFACTS)
    try:
        written = copy_artifacts(Path(args.build_dir), dest, names)
    except MissingArtifactError as exc:
        _logger.critical("%s", exc)
        return 1
    _logger.info("Copied %d artifacts into %s", len(written), dest)
    return 0


async def _check(rpc_url: str | None) -> None:
    from polymath import Polymath

    polymath = Polymath.from_rpc_url(rpc_url)
    if not await polymath.w3.is_connected():
        raise ConnectionError(f"Cannot connect to RPC at {rpc_url or get_config().get_rpc_url()}")
    async with polymath:
        _logger.info("PolyToken              : %s", polymath.poly_token.address)
        _logger.info("Customers              : %s", polymath.customers.address)
        _logger.info("Compliance             : %s", polymath.compliance.address)
        _logger.info("SecurityTokenRegistrar : %s", polymath.registrar.address)


def cmd_check(args: argparse.Namespace) -> int:
    try:
        validate_all_configs()
    except ConfigValidationError as exc:
        _logger.critical("Config validation failed:\n%s", exc)
        return 1

    try:
        asyncio.run(_check(args.rpc_url))
    except (PolymathError, ConnectionError) as exc:
        _logger.critical("Platform check failed: %s", exc)
        return 1
    return 0


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="polymath", description="Polymath client tools")
    subparsers = parser.add_subparsers(dest="command")

    copy_parser = subparsers.add_parser(
        "copyartifacts", help="Copy and trim contract build artifacts"
    )
    copy_parser.add_argument(
        "--build-dir", default="build/contracts", help="Directory of full build artifacts"
    )
    copy_parser.add_argument(
        "--dest", default=None, help="Destination directory (default: configured artifacts dir)"
    )
    copy_parser.add_argument("names", nargs="*", help="Contract names (default: all platform contracts)")

    check_parser = subparsers.add_parser("check", help="Connect and bind the platform contracts")
    check_parser.add_argument("--rpc-url", default=None, help="JSON-RPC endpoint")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "copyartifacts":
        return cmd_copy_artifacts(args)
    if args.command == "check":
        return cmd_check(args)
    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
