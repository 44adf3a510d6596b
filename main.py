# main.py

"""Entry point for the price_watch monitor (daemon or one-off CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("price_watch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(p["id"] for p in Settings.AVAILABLE_PLATFORMS)

    parser = argparse.ArgumentParser(
        prog="price_watch",
        description="Product price-drop monitor with email alerts.",
        epilog=f"Supported platforms: {valid_ids}",
    )
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Run one price check over all active watches and exit.",
    )
    actions.add_argument(
        "--add",
        nargs=3,
        metavar=("URL", "TARGET", "EMAIL"),
        default=None,
        help="Create a watch for URL with a target price.",
    )
    actions.add_argument(
        "--list",
        action="store_true",
        default=False,
        dest="list_watches",
        help="List active watches.",
    )
    actions.add_argument(
        "--remove",
        type=int,
        metavar="ID",
        default=None,
        help="Deactivate a watch (history is kept).",
    )
    actions.add_argument(
        "--purge",
        type=int,
        metavar="ID",
        default=None,
        help="Delete a watch and its price history permanently.",
    )
    actions.add_argument(
        "--history",
        type=int,
        metavar="ID",
        default=None,
        help="Show recent prices and statistics for a watch.",
    )
    actions.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on all platforms.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO logs to the console.",
    )
    return parser


def _run_daemon() -> None:
    """Run the background monitor until interrupted."""
    from src.cli.runner import run_daemon

    try:
        exit_code = run_daemon()
    except Exception:
        logger.critical("Fatal error in monitor daemon", exc_info=True)
        raise
    finally:
        logger.info("price_watch daemon shutting down")
    sys.exit(exit_code)


def _run_add(raw: list[str]) -> None:
    """Parse --add arguments and create the watch."""
    from src.cli.runner import add_watch

    url, target, email = raw
    try:
        target_price = float(target)
    except ValueError:
        print(f"Invalid target price: {target}", file=sys.stderr)
        sys.exit(2)
    sys.exit(add_watch(url, target_price, email))


def main() -> None:
    """Route to the daemon (no action) or a one-off command."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("price_watch starting, log file: %s", log_file)

    from src.cli import runner

    if args.check:
        sys.exit(runner.run_check())
    elif args.add is not None:
        _run_add(args.add)
    elif args.list_watches:
        sys.exit(runner.list_watches())
    elif args.remove is not None:
        sys.exit(runner.remove_watch(args.remove))
    elif args.purge is not None:
        sys.exit(runner.purge_watch(args.purge))
    elif args.history is not None:
        sys.exit(runner.show_history(args.history))
    elif args.health:
        sys.exit(asyncio.run(runner.run_health_check()))
    else:
        _run_daemon()


if __name__ == "__main__":
    main()
