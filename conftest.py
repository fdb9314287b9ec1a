import asyncio
import base64
import json
import sys
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from config import Config

FAKE_SERVER = Path(__file__).parent / "fake_mcp_server.py"


class FakeStdin:
    """Collects what the client writes to the server."""

    def __init__(self):
        self.writes = []
        self.closed = False

    def write(self, data: bytes):
        self.writes.append(data)

    async def drain(self):
        pass

    def is_closing(self):
        return self.closed

    @property
    def messages(self):
        return [json.loads(data.decode()) for data in self.writes]


class FakeProcess:
    """Stand-in for an asyncio subprocess whose stdout the test feeds."""

    pid = 4242

    def __init__(self):
        self.stdin = FakeStdin()
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.returncode = None

    def respond(self, message):
        self.stdout.feed_data((json.dumps(message) + "\n").encode())

    def terminate(self):
        self.returncode = -15
        self.stdout.feed_eof()
        self.stderr.feed_eof()

    kill = terminate

    async def wait(self):
        return self.returncode


@pytest.fixture
def settings(tmp_path):
    """Configuration pointing at the fake server with outputs under tmp_path."""
    cfg = Config()
    cfg.SERVER_COMMAND = sys.executable
    cfg.SERVER_ARGS = [str(FAKE_SERVER)]
    cfg.IPC_PATH = str(tmp_path / "ipc.sock")
    cfg.DOM_OUTPUT = str(tmp_path / "dom.html")
    cfg.SCREENSHOT_OUTPUT = str(tmp_path / "screenshot.png")
    cfg.LOG_FILE = str(tmp_path / "visual_test.log")
    cfg.REQUEST_TIMEOUT = 5.0
    cfg.RUN_TIMEOUT = 20.0
    cfg.SHUTDOWN_TIMEOUT = 2.0
    cfg.SEND_INITIALIZED = True
    return cfg


@pytest.fixture
def png_bytes():
    buffer = BytesIO()
    Image.new("RGB", (3, 2), color="red").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_data_uri(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode()
