"""
HTML conformance checks against the Nu HTML Checker.

Provides:
- resolve_html: turn a caller's `source` into markup (rendered page, fetch, file, or literal)
- check_html: POST markup to the checker and summarize its messages
- validate_source: both steps together
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any

from .. import http_client
from ..http_client import HttpClientError
from .base import is_localhost_url
from .scan import render_html

if TYPE_CHECKING:
    from ..config import ScannerConfig
    from ..launcher import BrowserLauncher

logger = logging.getLogger("mcp.local_scanner.html")


def _looks_like_path(source: str) -> bool:
    return "/" in source or "\\" in source


def _read_html_file(source: str) -> str | None:
    """Content of `source` when it names a readable regular file, else None."""
    if not _looks_like_path(source) or not os.path.isfile(source):
        return None
    try:
        with open(source, encoding="utf-8", errors="replace") as fp:
            return fp.read()
    except OSError:
        return None


def _complete_body(response: dict[str, object], what: str, config: ScannerConfig) -> str:
    """Body of a capped response; a cut-off body is an error, never a partial result."""
    if response.get("truncated"):
        raise HttpClientError(
            f"Response body exceeds MCP_HTTP_MAX_BYTES ({what} larger than {config.http_max_bytes} bytes)"
        )
    return str(response["body"])


def resolve_html(config: ScannerConfig, launcher: BrowserLauncher, source: str, is_url: bool) -> str:
    if is_url:
        if is_localhost_url(source):
            return render_html(config, launcher, source)
        return _complete_body(http_client.http_get(source, config), "page", config)
    content = _read_html_file(source)
    if content is not None:
        logger.info("html_source kind=file path=%s", source)
        return content
    return source


def check_html(config: ScannerConfig, html: str) -> dict[str, Any]:
    response = http_client.http_post(
        config.validator_url,
        html.encode("utf-8"),
        config,
        content_type="text/html; charset=utf-8",
    )
    try:
        report = json.loads(_complete_body(response, "validator response", config))
    except json.JSONDecodeError as exc:
        raise HttpClientError(f"HTML validator returned a non-JSON response (status {response['status']})") from exc
    messages = report.get("messages") if isinstance(report, dict) else None
    if not isinstance(messages, list):
        raise HttpClientError("HTML validator response has no message list")
    valid = not any(isinstance(m, dict) and m.get("type") == "error" for m in messages)
    return {"valid": valid, "messages": messages}


def validate_source(
    config: ScannerConfig,
    launcher: BrowserLauncher,
    source: str,
    is_url: bool = False,
) -> dict[str, Any]:
    html = resolve_html(config, launcher, source, is_url)
    result = check_html(config, html)
    return {"source": source, "isUrl": is_url, **result}
