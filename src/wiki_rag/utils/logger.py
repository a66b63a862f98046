"""Logging configuration and utilities."""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional


ROOT_LOGGER = "wiki_rag"


def setup_logger(
    name: str = ROOT_LOGGER,
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    file_output: bool = True,
    log_format: Optional[str] = None,
    console_level: Optional[str] = None,
) -> logging.Logger:
    """
    Set up a logger with console and/or file output.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (will be created if doesn't exist)
        console_output: Whether to output to console
        file_output: Whether to output to file
        log_format: Custom log format string
        console_level: Separate level for the console handler (defaults to level)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(log_format)

    # Console goes to stderr so it never interleaves with answers on stdout
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, (console_level or level).upper()))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if file_output and log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a component logger under the package logger.

    Names outside the package namespace are prefixed with it, so component
    loggers always reach the handlers setup_logger attaches to "wiki_rag".

    Args:
        name: Component name ("pipeline") or full dotted name ("wiki_rag.pipeline")

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
