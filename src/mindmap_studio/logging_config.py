"""Logging configuration for mindmap-studio."""

import sys

from loguru import logger

# stdout carries CLI output and the MCP stdio transport, so logs go to stderr.
_QUIET_FORMAT = "{level.icon} {message}"
_VERBOSE_FORMAT = "{level.icon} <dim>{name}:{function}</dim> {message}"


def configure_logging(*, verbose: bool = False) -> None:
    """Send INFO (or DEBUG with ``verbose``) and above to stderr."""
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format=_VERBOSE_FORMAT)
    else:
        logger.add(sys.stderr, level="INFO", format=_QUIET_FORMAT)
