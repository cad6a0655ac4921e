"""Command-line entry point for nftw-deployments library."""

import logging
import sys
from typing import Mapping, Optional

from .config import load_config
from .exceptions import ConfigurationError
from .orchestrator import DeploymentOrchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(message)s"


class _BelowErrorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Send progress lines to stdout and faults to stderr.

    Replaces handlers from an earlier call, so repeated runs in one process
    don't duplicate output.

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(__package__)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.addFilter(_BelowErrorFilter())
    stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger.addHandler(stdout_handler)
    package_logger.addHandler(stderr_handler)
    package_logger.setLevel(min(level, logging.ERROR))
    return package_logger


def main(environ: Optional[Mapping[str, str]] = None, **orchestrator_kwargs) -> int:
    """
    Deploy NFTWEscrow and NFTWRental to the network named by $DEPLOY_NETWORK.

    Args:
        environ: Environment mapping (defaults to .env plus os.environ)
        **orchestrator_kwargs: Passed to DeploymentOrchestrator
                               (connect_signer, factory_for,
                               load_artifact)

    Returns:
        Process exit code: 0 when both contracts are confirmed, 1 otherwise
    """
    configure_logging()

    try:
        config = load_config(environ)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1

    result = DeploymentOrchestrator(config, **orchestrator_kwargs).run()
    return result.exit_code


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
