"""
Configuration management for the MCP visual tester.
"""

import logging
import os
import shlex
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_number(name: str, cast=float):
    value = os.getenv(name)
    return cast(value) if value else None


class Config:
    """Configuration class for the MCP visual tester."""

    # Server process
    SERVER_COMMAND: str = os.getenv("VISUAL_TEST_SERVER_COMMAND", "node")
    SERVER_ARGS: List[str] = shlex.split(os.getenv("VISUAL_TEST_SERVER_ARGS", "build/index.js"))
    IPC_ENV_VAR: str = os.getenv("VISUAL_TEST_IPC_ENV_VAR", "TAURI_MCP_IPC_PATH")
    IPC_PATH: str = os.getenv("VISUAL_TEST_IPC_PATH", "/tmp/tauri-mcp.sock")

    # Protocol
    PROTOCOL_VERSION: str = os.getenv("VISUAL_TEST_PROTOCOL_VERSION", "2024-11-05")
    CLIENT_NAME: str = os.getenv("VISUAL_TEST_CLIENT_NAME", "visual-tester")
    CLIENT_VERSION: str = os.getenv("VISUAL_TEST_CLIENT_VERSION", "1.0.0")
    SEND_INITIALIZED: bool = os.getenv("VISUAL_TEST_SEND_INITIALIZED", "1").lower() not in ("0", "false", "no")

    # Target window
    WINDOW_LABEL: str = os.getenv("VISUAL_TEST_WINDOW_LABEL", "main")

    # Output files
    DOM_OUTPUT: str = os.getenv("VISUAL_TEST_DOM_OUTPUT", "/tmp/skycode-dom.html")
    SCREENSHOT_OUTPUT: str = os.getenv("VISUAL_TEST_SCREENSHOT_OUTPUT", "/tmp/skycode-screenshot.png")
    LOG_FILE: str = os.getenv("VISUAL_TEST_LOG_FILE", "visual_test.log")

    # Timeouts (in seconds)
    REQUEST_TIMEOUT: float = float(os.getenv("VISUAL_TEST_REQUEST_TIMEOUT", "30.0"))
    RUN_TIMEOUT: float = float(os.getenv("VISUAL_TEST_RUN_TIMEOUT", "60.0"))
    SHUTDOWN_TIMEOUT: float = float(os.getenv("VISUAL_TEST_SHUTDOWN_TIMEOUT", "5.0"))

    # Optional take_screenshot arguments, forwarded only when set
    SCREENSHOT_QUALITY: Optional[int] = _optional_number("VISUAL_TEST_SCREENSHOT_QUALITY", int)
    SCREENSHOT_MAX_WIDTH: Optional[int] = _optional_number("VISUAL_TEST_SCREENSHOT_MAX_WIDTH", int)
    SCREENSHOT_MAX_SIZE_MB: Optional[float] = _optional_number("VISUAL_TEST_SCREENSHOT_MAX_SIZE_MB")
    APPLICATION_NAME: Optional[str] = os.getenv("VISUAL_TEST_APPLICATION_NAME") or None

    # Logging
    LOG_LEVEL: str = os.getenv("VISUAL_TEST_LOG_LEVEL", "INFO")

    @property
    def server_env(self) -> dict:
        """Environment for the server process: ours plus the IPC socket path."""
        return {**os.environ, self.IPC_ENV_VAR: self.IPC_PATH}

    def screenshot_arguments(self) -> dict:
        """Arguments for the take_screenshot tool call."""
        arguments = {"window_label": self.WINDOW_LABEL}
        optional = {
            "quality": self.SCREENSHOT_QUALITY,
            "max_width": self.SCREENSHOT_MAX_WIDTH,
            "max_size_mb": self.SCREENSHOT_MAX_SIZE_MB,
            "application_name": self.APPLICATION_NAME,
        }
        arguments.update({key: value for key, value in optional.items() if value is not None})
        return arguments

    def get_log_level(self) -> int:
        """Get logging level from string."""
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL
        }
        return level_map.get(self.LOG_LEVEL.upper(), logging.INFO)


# Global config instance
config = Config()
