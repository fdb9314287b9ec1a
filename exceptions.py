"""
Custom exception classes for the MCP visual tester.
"""

from typing import Any, Optional


class VisualTestError(Exception):
    """Base exception for visual test runs"""
    pass

class ServerStartError(VisualTestError):
    """MCP server process could not be started"""
    pass

class RequestTimeoutError(VisualTestError):
    """No response arrived within the request window"""
    pass

class ConnectionClosedError(VisualTestError):
    """Server stdin is gone or the client was closed with requests pending"""
    pass

class ServerError(VisualTestError):
    """Server answered a request with a JSON-RPC error"""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data

class ToolResultError(VisualTestError):
    """A tool result could not be interpreted"""
    pass

class RunTimeoutError(VisualTestError):
    """Whole test run exceeded its time budget"""
    pass
