"""
MCP server exposing localhost scanning, linting and HTML validation tools.

This module provides the process host: newline-delimited JSON-RPC over stdio,
protocol handling and lifecycle. Tool dispatch lives in server/registry.py.
"""

from __future__ import annotations

import json
import logging
import os
import signal
import sys
from contextlib import suppress
from typing import Any

from .config import ScannerConfig
from .launcher import BrowserLauncher
from .server.contract import (
    DEFAULT_PROTOCOL_VERSION,
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    initialize_result,
    select_protocol,
    tools_list,
)
from .server.redaction import redact_jsonrpc_for_dump, redact_jsonrpc_for_log, redact_tool_arguments
from .server.registry import create_default_registry
from .server.types import INTERNAL_ERROR, METHOD_NOT_FOUND, PARSE_ERROR, ProtocolError, ToolResult

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("mcp.local_scanner")

__all__ = [
    "SUPPORTED_PROTOCOL_VERSIONS",
    "LATEST_PROTOCOL_VERSION",
    "DEFAULT_PROTOCOL_VERSION",
    "McpServer",
    "main",
]


def _dump_frame(direction: bytes, payload: dict[str, Any], raw_line: bytes) -> None:
    dump_path = os.environ.get("MCP_DUMP_FRAMES")
    if not dump_path:
        return
    if dump_dir := os.path.dirname(dump_path):
        os.makedirs(dump_dir, exist_ok=True)
    with open(dump_path, "ab") as fp:
        fp.write(direction)
        if os.environ.get("MCP_DUMP_FRAMES_RAW") == "1":
            fp.write(raw_line.rstrip(b"\n") + b"\n")
        else:
            safe = redact_jsonrpc_for_dump(payload)
            fp.write((json.dumps(safe, ensure_ascii=False) + "\n").encode())


def _write_message(payload: dict[str, Any]) -> None:
    """Write JSON-RPC message to stdout."""
    line = (json.dumps(payload, ensure_ascii=False) + "\n").encode()
    _dump_frame(b"--out--\n", payload, line)
    sys.stdout.buffer.write(line)
    sys.stdout.buffer.flush()


def _read_line() -> bytes | None:
    """Read one raw frame from stdin; None at EOF."""
    line = sys.stdin.buffer.readline()
    if not line:
        return None
    return line


def _error_response(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


class McpServer:
    """MCP Server with registry-based tool dispatch."""

    def __init__(self, config: ScannerConfig | None = None) -> None:
        self.config = config or ScannerConfig.from_env()
        self.launcher = BrowserLauncher(self.config)
        self.registry = create_default_registry()
        self.closed = False

    def handle_initialize(self, request_id: Any, params: dict[str, Any] | None = None) -> None:
        """Handle initialize request."""
        requested = params.get("protocolVersion") if isinstance(params, dict) else None
        protocol = select_protocol(requested)
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": initialize_result(protocol)})

    def handle_list_tools(self, request_id: Any) -> None:
        """Handle tools/list request."""
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": {"tools": tools_list()}})

    def _log_call(self, name: str, arguments: Any) -> None:
        """Log tool call with sanitized arguments."""
        logger.info("tool=%s args=%s", name, redact_tool_arguments(name, arguments))

    def handle_call_tool(self, request_id: Any, name: str, arguments: Any) -> None:
        """Handle a tool call via registry dispatch.

        Unknown tools and rejected arguments become JSON-RPC errors; anything that
        goes wrong inside a tool comes back as a result with isError=true.
        """
        self._log_call(name, arguments)

        try:
            result = self.registry.dispatch(name, self.config, self.launcher, arguments)
        except ProtocolError as e:
            _write_message({"jsonrpc": "2.0", "id": request_id, "error": e.to_dict()})
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("tool_crashed tool=%s", name)
            result = ToolResult.error(f"Error running {name}: {exc}")

        _write_message({"jsonrpc": "2.0", "id": request_id, "result": result.to_response()})

    def dispatch(self, message: dict[str, Any]) -> None:
        """Dispatch incoming JSON-RPC message to appropriate handler."""
        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params") or {}

        if isinstance(method, str) and method.startswith("notifications/"):
            return
        if method == "initialize":
            self.handle_initialize(request_id, params)
        elif method in ("tools/list", "list_tools"):
            self.handle_list_tools(request_id)
        elif method in ("tools/call", "call_tool"):
            name = params.get("name") if isinstance(params, dict) else None
            arguments = params.get("arguments") if isinstance(params, dict) else None
            self.handle_call_tool(request_id, name if isinstance(name, str) else "", arguments)
        elif method == "ping":
            _write_message({"jsonrpc": "2.0", "id": request_id, "result": {}})
        else:
            _write_message(_error_response(request_id, METHOD_NOT_FOUND, f"Method {method} not found"))

    def process_line(self, line: bytes) -> None:
        """Decode one frame and dispatch it; a bad frame never stops the server."""
        line = line.strip()
        if not line:
            return
        try:
            message = json.loads(line.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            _write_message(_error_response(None, PARSE_ERROR, f"Parse error: {exc}"))
            return
        if not isinstance(message, dict):
            _write_message(_error_response(None, PARSE_ERROR, "Parse error: expected a JSON object"))
            return

        if os.environ.get("MCP_TRACE"):
            logger.info("recv %s", redact_jsonrpc_for_log(message))
        _dump_frame(b"--in--\n", message, line)

        try:
            self.dispatch(message)
        except Exception as exc:
            logger.exception("request_failed method=%s", message.get("method"))
            if message.get("id") is not None:
                _write_message(_error_response(message.get("id"), INTERNAL_ERROR, f"Internal error: {exc}"))

    def serve(self) -> None:
        """Serve requests until stdin closes."""
        while not self.closed:
            line = _read_line()
            if line is None:
                break
            self.process_line(line)

    def close(self) -> None:
        """Tear down: stop the browser this server launched (if any)."""
        if self.closed:
            return
        self.closed = True
        if self.launcher.stop():
            logger.info("owned browser stopped")


def _install_signal_handlers() -> None:
    def _on_signal(signum: int, frame: Any) -> None:  # noqa: ARG001
        logger.info("signal=%s shutting down", signum)
        raise KeyboardInterrupt

    for sig in (signal.SIGINT, signal.SIGTERM):
        # Only the main thread may install handlers.
        with suppress(ValueError, OSError):
            signal.signal(sig, _on_signal)


def main() -> None:
    """Main entry point for MCP server."""
    server = McpServer()
    _install_signal_handlers()
    logger.info("Local Scanner MCP server running on stdio")
    try:
        server.serve()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()


if __name__ == "__main__":
    main()
