"""
JSON-RPC client for an MCP server running as a child process.

Requests are written to the server's stdin one JSON object per line. The
server's stdout is read in chunks and reassembled into lines; each line that
parses as a JSON object carrying the id of a pending request settles that
request. Everything else on the stream is ignored, so log noise interleaved
with protocol messages does no harm.
"""

import asyncio
import codecs
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from exceptions import (
    ServerStartError, RequestTimeoutError, ConnectionClosedError, ServerError
)
from models import (
    JSONRPCRequest, JSONRPCNotification, ErrorObject, InitializeRequestParams,
    ClientCapabilities, Implementation, CallToolRequestParams
)
from utils import Metrics

logger = logging.getLogger("mcp_visual_test.client")

CHUNK_SIZE = 64 * 1024


@dataclass
class PendingRequest:
    """A request waiting for its response or its timeout."""
    method: str
    future: asyncio.Future
    timer: asyncio.TimerHandle
    started: float


class StdioMCPClient:
    """
    Talks JSON-RPC 2.0 to an MCP server over its stdin/stdout.

    Responses are matched to requests by id, so several requests may be in
    flight at once and may be answered in any order.
    """

    def __init__(
        self,
        command: str,
        args: Optional[List[str]] = None,
        env: Optional[Dict[str, str]] = None,
        request_timeout: float = 30.0,
        shutdown_timeout: float = 5.0,
        metrics: Optional[Metrics] = None,
    ):
        self.command = command
        self.args = list(args or [])
        self.env = env
        self.request_timeout = request_timeout
        self.shutdown_timeout = shutdown_timeout
        self.metrics = metrics or Metrics()

        self._process = None
        self._next_id = 1
        self._pending: Dict[int, PendingRequest] = {}
        self._buffer = ""
        self._console_buffer = ""
        self._readers: List[asyncio.Task] = []
        self._closing = False

    async def __aenter__(self) -> "StdioMCPClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for a response."""
        return len(self._pending)

    async def start(self) -> None:
        """Spawn the server process and start reading its output."""
        logger.info(f"Starting MCP server: {self.command} {' '.join(self.args)}")
        try:
            process = await asyncio.create_subprocess_exec(
                self.command, *self.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.env,
            )
        except OSError as e:
            raise ServerStartError(f"Could not start MCP server '{self.command}': {e}") from e
        self.attach(process)
        logger.debug(f"MCP server started (PID: {process.pid})")

    def attach(self, process) -> None:
        """Take ownership of an already running process."""
        self._process = process
        self._readers = [
            asyncio.create_task(self._read_stdout()),
            asyncio.create_task(self._read_stderr()),
        ]

    async def send(self, method: str, params: Any = None) -> Any:
        """
        Send a request and wait for its result.

        Args:
            method: JSON-RPC method name
            params: Any JSON-encodable value

        Returns:
            The result member of the matching response

        Raises:
            ServerError: the response carried an error
            RequestTimeoutError: no response within request_timeout seconds
            ConnectionClosedError: the server's stdin is no longer writable
        """
        request_id = self._next_id
        self._next_id += 1
        line = JSONRPCRequest(id=request_id, method=method, params=params).model_dump_json() + "\n"

        loop = asyncio.get_running_loop()
        future = loop.create_future()
        timer = loop.call_later(self.request_timeout, self._expire, request_id)
        self._pending[request_id] = PendingRequest(method, future, timer, time.monotonic())
        self.metrics.increment("requests_total")
        logger.debug(f">>> {line.rstrip()}")

        try:
            await self._write(line)
        except ConnectionClosedError:
            self._pending.pop(request_id, None)
            timer.cancel()
            raise

        return await future

    async def notify(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Send a notification. No response is expected."""
        line = JSONRPCNotification(method=method, params=params).model_dump_json(exclude_none=True) + "\n"
        logger.debug(f">>> {line.rstrip()}")
        await self._write(line)

    async def initialize(self, protocol_version: str, client_name: str, client_version: str) -> Any:
        """Perform the MCP initialize handshake."""
        params = InitializeRequestParams(
            protocolVersion=protocol_version,
            capabilities=ClientCapabilities(),
            clientInfo=Implementation(name=client_name, version=client_version),
        )
        return await self.send("initialize", params.model_dump(exclude_none=True))

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a named tool through tools/call."""
        params = CallToolRequestParams(name=name, arguments=arguments or {})
        return await self.send("tools/call", params.model_dump())

    def feed(self, text: str) -> None:
        """Consume a chunk of server output, settling any completed responses."""
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            self._handle_line(line)

    async def close(self) -> None:
        """Terminate the server and fail whatever is still pending."""
        self._closing = True
        process = self._process
        if process is not None and process.returncode is None:
            try:
                process.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(process.wait(), timeout=self.shutdown_timeout)
            except asyncio.TimeoutError:
                logger.warning("MCP server did not exit after terminate, killing it")
                process.kill()
                await process.wait()

        for task in self._readers:
            task.cancel()
        await asyncio.gather(*self._readers, return_exceptions=True)
        self._readers = []

        for request_id, entry in self._pending.items():
            entry.timer.cancel()
            if not entry.future.done():
                entry.future.set_exception(
                    ConnectionClosedError(f"Client closed while {entry.method} (id={request_id}) was pending")
                )
        self._pending.clear()

    async def _write(self, line: str) -> None:
        stdin = self._process.stdin if self._process is not None else None
        if stdin is None or stdin.is_closing():
            raise ConnectionClosedError("MCP server stdin is closed")
        try:
            stdin.write(line.encode("utf-8"))
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise ConnectionClosedError(f"MCP server stdin is closed: {e}") from e

    def _expire(self, request_id: int) -> None:
        entry = self._pending.pop(request_id, None)
        if entry is None or entry.future.done():
            return
        self.metrics.record_error("RequestTimeoutError")
        entry.future.set_exception(
            RequestTimeoutError(f"Request timeout: {entry.method} (id={request_id}) after {self.request_timeout}s")
        )

    def _handle_line(self, line: str) -> None:
        if not line.strip():
            return
        try:
            message = json.loads(line)
        except ValueError:
            self.metrics.increment("lines_ignored")
            logger.debug(f"Ignoring non-JSON output: {line[:200]}")
            return

        if not isinstance(message, dict):
            return
        request_id = message.get("id")
        if isinstance(request_id, bool) or not isinstance(request_id, int):
            return
        entry = self._pending.pop(request_id, None)
        if entry is None:
            logger.debug(f"Ignoring response for unknown id {request_id}")
            return

        entry.timer.cancel()
        self.metrics.record_time(f"{entry.method}_duration", time.monotonic() - entry.started)
        logger.debug(f"<<< {line[:500]}")
        if entry.future.done():
            return

        error = message.get("error")
        if error:
            self.metrics.record_error("ServerError")
            entry.future.set_exception(self._server_error(error))
        else:
            entry.future.set_result(message.get("result"))

    @staticmethod
    def _server_error(error: Any) -> ServerError:
        if isinstance(error, dict):
            try:
                parsed = ErrorObject.model_validate(error)
            except ValidationError:
                message = error.get("message")
                parsed = ErrorObject(message=message if isinstance(message, str) else None)
            return ServerError(parsed.message or json.dumps(error), code=parsed.code, data=parsed.data)
        return ServerError(json.dumps(error))

    async def _read_stdout(self) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await self._process.stdout.read(CHUNK_SIZE)
            if not chunk:
                break
            self.feed(decoder.decode(chunk))
        self.feed(decoder.decode(b"", final=True))
        if not self._closing:
            logger.warning("MCP server closed its stdout")

    def feed_console(self, text: str) -> None:
        """Log server stderr one complete line at a time."""
        self._console_buffer += text
        *lines, self._console_buffer = self._console_buffer.split("\n")
        for line in lines:
            self._log_console(line)

    def _log_console(self, line: str) -> None:
        line = line.rstrip("\r")
        if line.strip():
            logger.debug(f"[server] {line}")

    async def _read_stderr(self) -> None:
        # Server console output, kept for the log file only
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await self._process.stderr.read(CHUNK_SIZE)
            if not chunk:
                break
            self.feed_console(decoder.decode(chunk))
        self.feed_console(decoder.decode(b"", final=True))
        self._log_console(self._console_buffer)
        self._console_buffer = ""
