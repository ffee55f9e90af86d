"""
Logging utility for the configuration manager.

This module provides consistent logging setup and message formatting for
section loading, merging, validation and template generation.
"""

import logging
import sys
from typing import Optional


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with consistent formatting.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Configured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Configuration built successfully")
    """
    return logging.getLogger(name)


def setup_logging(level: str = "INFO", format_string: Optional[str] = None) -> None:
    """
    Set up logging configuration for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        format_string: Custom format string for log messages

    Raises:
        ValueError: If the level name is unknown

    Example:
        >>> setup_logging("DEBUG")
        >>> logger = get_logger(__name__)
        >>> logger.debug("Detailed debug information")
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True
    )

    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("yaml").setLevel(logging.WARNING)
    logging.getLogger("jsonschema").setLevel(logging.WARNING)


def log_config_operation(logger: logging.Logger, operation: str, details: str,
                         level: int = logging.INFO) -> None:
    """
    Log configuration operations with consistent formatting.

    Args:
        logger: Logger instance
        operation: Operation being performed (e.g., "MERGE", "VALIDATE", "BUILD")
        details: Details about the operation
        level: Logging level to emit at

    Example:
        >>> logger = get_logger(__name__)
        >>> log_config_operation(logger, "MERGE", "section='postgres'")
    """
    logger.log(level, f"[{operation}] {details}")


def log_config_error(logger: logging.Logger, operation: str, error: Exception, context: str = "") -> None:
    """
    Log configuration errors with consistent formatting.

    Args:
        logger: Logger instance
        operation: Operation that failed
        error: Exception that occurred
        context: Additional context about the error

    Example:
        >>> logger = get_logger(__name__)
        >>> try:
        ...     manager = builder.build()
        ... except ConfigException as e:
        ...     log_config_error(logger, "BUILD", e, "section='postgres'")
    """
    context_str = f" ({context})" if context else ""
    logger.error(f"[{operation}] FAILED{context_str}: {str(error)}")
