"""
Utils package for the MCP visual tester.
"""

from .logger import setup_logging, LOGGER_NAME
from .metrics import Metrics
from .image_processor import split_data_uri, decode_base64_payload, save_screenshot, describe_image

__all__ = [
    "setup_logging", "LOGGER_NAME",
    "Metrics",
    "split_data_uri", "decode_base64_payload", "save_screenshot", "describe_image"
]
