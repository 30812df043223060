"""Command-line interface for Hawkeye.

This module serves as the entrypoint for the Hawkeye API server.
"""

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from hawkeye import __description__, __version__
from hawkeye.api import create_app
from hawkeye.config import HawkeyeConfig


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration.

    Args:
        verbose: Whether to enable verbose logging.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(level=log_level, format=log_format, stream=sys.stdout)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Command-line arguments to parse. If None, sys.argv will be used.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(prog="hawkeye", description=__description__)

    parser.add_argument("--version", action="store_true", help="Show the version and exit")

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    parser.add_argument("--namespace", help="Namespace holding the Watchers (overrides HAWKEYE_NAMESPACE)")

    parser.add_argument("--host", help="Address to bind the API to (overrides HAWKEYE_HOST)")

    parser.add_argument("--port", type=int, help="Port to serve the API on (overrides HAWKEYE_PORT)")

    parser.add_argument(
        "--worker-image", help="Container image used for Watcher workloads (overrides HAWKEYE_WORKER_IMAGE)"
    )

    return parser.parse_args(args)


def build_config(parsed_args: argparse.Namespace) -> HawkeyeConfig:
    """Create the configuration from the environment, then apply command-line overrides.

    Raises:
        ValueError: If a setting is invalid.
    """
    config = HawkeyeConfig.from_env()

    overrides = {
        "namespace": parsed_args.namespace,
        "host": parsed_args.host,
        "port": parsed_args.port,
        "worker_image": parsed_args.worker_image,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        # Re-validate so overrides go through the same checks as the environment
        config = HawkeyeConfig(**{**config.model_dump(), **overrides})
    return config


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Hawkeye API server.

    Args:
        args: Command-line arguments. If None, sys.argv will be used.

    Returns:
        Exit code.
    """
    parsed_args = parse_args(args)
    if parsed_args.version:
        print(f"Hawkeye version {__version__}: {__description__}")
        return 0

    try:
        setup_logging(parsed_args.verbose)
        logger = logging.getLogger(__name__)
        logger.info("Starting Hawkeye API")

        config = build_config(parsed_args)
        logger.info(
            f"Configuration: namespace={config.namespace}, worker_image={config.worker_image}, "
            f"request_timeout={config.request_timeout}s, call_watcher_timeout={config.call_watcher_timeout}s, "
            f"listen={config.host}:{config.port}"
        )

        app = create_app(config)
        uvicorn.run(app, host=config.host, port=config.port, log_config=None)

    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted by user")
    except (ValueError, ValidationError) as e:
        logging.getLogger(__name__).error(f"Configuration error: {e}")
        return 1
    except RuntimeError as e:
        logging.getLogger(__name__).error(f"Startup error: {e}")
        return 1

    logging.getLogger(__name__).info("Hawkeye exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
