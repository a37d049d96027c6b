"""
Main module for Nest-Guard.

This module contains the main function that runs the Nest-Guard application.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_config
from .errors import ConfigError
from .monitor import run_forever
from .nest_client import NestClient
from .observation_log import ObservationLog

logger = logging.getLogger("nest-guard")

WEBHOOK_JOIN_TIMEOUT = 30  # seconds


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nest-guard",
        description="Restart a Nest thermostat whose cooling fails to bring the temperature down.",
    )
    parser.add_argument("--thermostat", "-id", dest="thermostat_id", help="thermostat id")
    parser.add_argument("--token", "-t", help="OAuth token")
    parser.add_argument("--minute", "-m", dest="minutes", help="sampling time in minutes (at least 1)")
    parser.add_argument("--config", "-c", dest="config_file", help="location of a JSON config file")
    parser.add_argument("--output", "-o", help="where to save the output .tsv file")
    parser.add_argument("--debug-output", dest="last_output", help="where to dump the last Nest response")
    parser.add_argument(
        "--debug", action="store_const", const=True, default=None, help="enable debug logging and dumps"
    )
    parser.add_argument(
        "--webhook-post", "-wp", dest="webhook_post", help="webhook POST fired when a system restart begins"
    )
    parser.add_argument(
        "--webhook-get", "-wg", dest="webhook_get", help="webhook GET fired when a system restart begins"
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="give up a restart step after this many writes (default: retry forever)",
    )
    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("nest-guard.log"),
        ],
        force=True,
    )
    logging.getLogger("requests").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.INFO)


def main(argv: Optional[List[str]] = None) -> None:
    """Main function."""
    args = parse_args(argv)
    overrides = {
        "thermostat_id": args.thermostat_id,
        "token": args.token,
        "minutes": args.minutes,
        "output": args.output,
        "last_output": args.last_output,
        "debug": args.debug,
        "webhook_post": args.webhook_post,
        "webhook_get": args.webhook_get,
    }

    try:
        config = load_config(config_file=args.config_file, overrides=overrides)
    except ConfigError as e:
        setup_logging()
        logger.error(f"Invalid configuration, exiting: {e}")
        sys.exit(1)

    if args.max_attempts is not None and args.max_attempts < 1:
        setup_logging()
        logger.error("Invalid configuration, exiting: --max-attempts must be at least 1")
        sys.exit(1)

    setup_logging(config.debug)
    logger.info(f"Starting Nest-Guard for thermostat {config.thermostat_id}")

    client = NestClient.from_config(config)
    observation_log = ObservationLog(config.output)
    pending = []

    try:
        run_forever(
            config,
            client,
            observation_log,
            max_attempts=args.max_attempts,
            pending=pending,
        )
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, exiting")
    finally:
        for dispatch in pending:
            dispatch.join(WEBHOOK_JOIN_TIMEOUT)
        client.close()

    logger.info("Nest-Guard stopped")


if __name__ == "__main__":
    main()
