"""
Screenshot payload handling for the MCP visual tester.
"""

import base64
import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError

BASE64_MARKER = "base64,"
NON_ALPHABET = re.compile(r"[^A-Za-z0-9+/]")
URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")

logger = logging.getLogger("mcp_visual_test.image")


def split_data_uri(data: str) -> Optional[Tuple[Optional[str], str]]:
    """
    Split a screenshot payload into its media type and base64 portion.

    Args:
        data: Text returned by the take_screenshot tool

    Returns:
        Tuple of (media_type, base64_payload), or None when the text
        carries no base64 marker
    """
    head, marker, payload = data.partition(BASE64_MARKER)
    if not marker:
        return None

    media_type = None
    if head.startswith("data:"):
        media_type = head[len("data:"):].split(";", 1)[0] or None
    return media_type, payload


def decode_base64_payload(payload: str) -> bytes:
    """
    Decode base64 text leniently.

    Characters outside the alphabet are dropped, URL-safe characters are
    accepted, decoding stops at the first padding character, and a dangling
    single character is discarded. Never raises on bad input.
    """
    cleaned = payload.split("=", 1)[0].translate(URLSAFE_TO_STANDARD)
    cleaned = NON_ALPHABET.sub("", cleaned)
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned)


def save_screenshot(payload: str, output_path: str) -> bytes:
    """
    Decode a base64 screenshot and write the raw bytes to disk.

    Args:
        payload: Base64 portion of the data URI
        output_path: File to write

    Returns:
        The decoded bytes
    """
    image_bytes = decode_base64_payload(payload)
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(image_bytes)
    return image_bytes


def describe_image(image_bytes: bytes) -> Optional[Dict[str, Any]]:
    """Identify a decoded screenshot. Returns None if Pillow cannot read it."""
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            return {
                "format": img.format,
                "width": img.width,
                "height": img.height,
                "mode": img.mode,
                "bytes": len(image_bytes),
            }
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Decoded screenshot is not a readable image: {e}")
        return None
