"""
Pydantic models for the client side of MCP (Model Context Protocol).

Covers the JSON-RPC 2.0 envelope written to the server and the payloads the
visual tester sends and reads back, following the schema at
https://modelcontextprotocol.io/specification/2024-11-05/schema.json
"""

from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import Any, Dict, List, Optional, Union, Literal


# Base JSON-RPC types
RequestId = Union[str, int]


class JSONRPCRequest(BaseModel):
    """JSON-RPC 2.0 request message."""
    jsonrpc: str = Field("2.0")
    id: RequestId
    method: str
    params: Any = None


class JSONRPCNotification(BaseModel):
    """JSON-RPC 2.0 notification message."""
    jsonrpc: str = Field("2.0")
    method: str
    params: Optional[Dict[str, Any]] = None


class ErrorObject(BaseModel):
    """The error member of a JSON-RPC error response."""
    code: Optional[int] = None
    message: Optional[str] = None
    data: Optional[Any] = None


# MCP-specific models

class Implementation(BaseModel):
    """Information about the implementation."""
    name: str
    version: str


class ClientCapabilities(BaseModel):
    """Capabilities declared by the client."""
    experimental: Optional[Dict[str, Any]] = None
    sampling: Optional[Dict[str, Any]] = None


class InitializeRequestParams(BaseModel):
    """Parameters for the initialize request."""
    protocolVersion: str
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)
    clientInfo: Implementation


class CallToolRequestParams(BaseModel):
    """Parameters for the tools/call request."""
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


# Content blocks for tool results

class TextContent(BaseModel):
    """Text content block."""
    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Image content block."""
    type: Literal["image"] = "image"
    data: str  # Base64-encoded image data
    mimeType: str


CONTENT_BLOCK_TYPES = {"text": TextContent, "image": ImageContent}


class CallToolResult(BaseModel):
    """Result of the tools/call request. Unknown or malformed blocks are kept raw."""
    content: List[Any] = Field(default_factory=list)
    isError: Optional[bool] = None

    @field_validator("content")
    @classmethod
    def parse_blocks(cls, content: List[Any]) -> List[Any]:
        blocks = []
        for item in content:
            block_type = item.get("type") if isinstance(item, dict) else None
            model = CONTENT_BLOCK_TYPES.get(block_type) if isinstance(block_type, str) else None
            if model is not None:
                try:
                    item = model.model_validate(item)
                except ValidationError:
                    pass
            blocks.append(item)
        return blocks

    @classmethod
    def from_result(cls, result: Any) -> "CallToolResult":
        """Build from a raw tools/call result, treating non-objects as empty."""
        if not isinstance(result, dict):
            return cls()
        return cls.model_validate(result)

    def first_text(self) -> str:
        """Text of the first content block, or an empty string."""
        if self.content and isinstance(self.content[0], TextContent):
            return self.content[0].text
        return ""

    def first_image(self) -> Optional[ImageContent]:
        """The first image block, if the tool returned one."""
        for block in self.content:
            if isinstance(block, ImageContent):
                return block
        return None


# Report models

class InteractiveElements(BaseModel):
    """Interactive element counts collected from the target window."""
    buttons: int = 0
    inputs: int = 0
    links: int = 0
    buttonTexts: List[str] = Field(default_factory=list)


class RunReport(BaseModel):
    """Everything a successful visual test run collected."""
    dom_path: str
    dom_length: int
    screenshot_path: Optional[str] = None
    screenshot_media_type: Optional[str] = None
    screenshot_info: Optional[Dict[str, Any]] = None
    window_info: Any = Field(default_factory=dict)
    errors: Dict[str, Any] = Field(default_factory=dict)
    elements: InteractiveElements = Field(default_factory=InteractiveElements)
