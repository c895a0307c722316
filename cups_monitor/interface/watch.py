#!/usr/bin/env python3
"""
CUPS Watch CLI - Command-line interface for the CUPS monitor.

Usage:
    python -m cups_monitor.interface.watch [--env-file .env] [--dry-run] [--once]

Exit codes:
    0: Stopped by SIGINT/SIGTERM (Ctrl+C for --once), or --once found CUPS healthy
    1: Configuration error, or --once found CUPS unhealthy
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

import requests

from cups_monitor.health import ConfigError, load_config, run_monitor, run_tick

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Stop the monitor loop on SIGINT and SIGTERM."""

    def _handler(signum, frame):
        logger.info("Shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monitor CUPS and alert PagerDuty on state changes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration (environment or env file, file values win):
  CUPS_URL                 URL to probe (default: http://localhost:631)
  PAGERDUTY_ROUTING_KEY    PagerDuty integration key (required)
  CHECK_INTERVAL_SECONDS   Seconds between checks (default: 30)
  REQUEST_TIMEOUT_SECONDS  HTTP timeout in seconds (default: 10)

Examples:
  cups-monitor
  cups-monitor --env-file /etc/cups-monitor.env
  cups-monitor --once --dry-run
        """,
    )

    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to KEY=VALUE config file (default: .env)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't send alerts, just log them",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single check now and exit (0 healthy, 1 unhealthy)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose)
    logger.info("CUPS Monitor starting...")

    try:
        config = load_config(args.env_file)
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    if args.dry_run:
        logger.info("Dry-run mode: No alerts will be sent")

    with requests.Session() as session:
        if args.once:
            try:
                healthy = run_tick(
                    True, config, session=session, dry_run=args.dry_run
                )
            except KeyboardInterrupt:
                logger.info("Shutting down...")
                return 0
            return 0 if healthy else 1

        stop_event = threading.Event()
        install_signal_handlers(stop_event)
        run_monitor(config, stop_event, session=session, dry_run=args.dry_run)

    return 0


if __name__ == "__main__":
    sys.exit(main())
