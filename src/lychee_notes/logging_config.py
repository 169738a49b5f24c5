"""Logging configuration for lychee-notes."""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False) -> None:
    """Send logs to stderr; stdout carries command output and the MCP protocol."""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
