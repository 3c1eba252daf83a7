"""Command line tool for building the objects that bootstrap the local cluster."""

import argparse
import asyncio
import logging
import sys
import traceback

from fleet_bootstrap.exceptions import FleetException
from . import build

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for bootstrapping the local Fleet cluster.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    build.BuildAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Fleet-bootstrap command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except FleetException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("fleet-bootstrap error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
