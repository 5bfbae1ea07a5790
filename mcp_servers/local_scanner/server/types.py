"""
Type definitions for MCP server responses and protocol errors.
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass, field
from typing import Any

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """Failure reported as a JSON-RPC error object, outside the tool response envelope."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(slots=True)
class ToolContent:
    """Single content item in tool response."""

    type: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Result of a tool execution."""

    content: list[ToolContent] = field(default_factory=list)
    is_error: bool = False
    # Raw payload for in-process callers and tests; not part of the wire format.
    data: Any | None = None

    @classmethod
    def json(cls, data: Any) -> ToolResult:
        """Pretty-printed JSON text content."""
        text = _json.dumps(data, indent=2, ensure_ascii=False)
        return cls(content=[ToolContent(type="text", text=text)], data=data)

    @classmethod
    def error(cls, message: str) -> ToolResult:
        """Tool-level failure: a successful protocol response flagged isError."""
        return cls(content=[ToolContent(type="text", text=message)], is_error=True)

    def to_content_list(self) -> list[dict[str, Any]]:
        return [c.to_dict() for c in self.content]

    def to_response(self) -> dict[str, Any]:
        return {"content": self.to_content_list(), "isError": self.is_error}
