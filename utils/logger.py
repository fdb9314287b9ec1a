"""
Logging configuration for the MCP visual tester.
"""

import logging
import sys
from pathlib import Path

LOGGER_NAME = "mcp_visual_test"


def setup_logging(log_file: str = "visual_test.log", level: int = logging.INFO):
    """
    Setup unified logging configuration.

    Args:
        log_file: Path to the log file
        level: Logging level (default: INFO)
    """
    # Create logger
    logger = logging.getLogger(LOGGER_NAME)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    # Console handler on stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)

    # File handler
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    # Server console output is always kept in the file
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)

    # Add handlers
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)

    return logger
