"""Redaction utilities for logging and frame dumps.

Keeps logs readable: secrets in query strings and typed text are masked, large
payloads (inline HTML, screenshot data URIs) are shortened.
"""

from __future__ import annotations

import os
import re
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_SENSITIVE_SUBSTRINGS = (
    "token",
    "secret",
    "password",
    "passwd",
    "pwd",
    "authorization",
    "cookie",
    "session",
    "jwt",
    "bearer",
    "api-key",
    "api_key",
    "apikey",
)

# Avoid false-positives like "author"/"authorship" while still protecting obvious keys.
_SENSITIVE_EXACT = {"auth"}

_DATA_URI_RE = re.compile(r"data:image/[a-z+]+;base64,[A-Za-z0-9+/=]+")

_LOG_MAX_CHARS = 200


def is_sensitive_key(key: str) -> bool:
    k = (key or "").strip().lower()
    if not k:
        return False
    if k in _SENSITIVE_EXACT:
        return True
    return any(s in k for s in _SENSITIVE_SUBSTRINGS)


def _dump_max_chars() -> int | None:
    raw = os.environ.get("MCP_DUMP_MAX_CHARS")
    if not raw:
        return 20_000
    try:
        value = int(raw)
    except ValueError:
        return 20_000
    return value if value > 0 else None


def redact_url(url: str) -> str:
    """Redact sensitive query parameters and userinfo; other URLs come back unchanged."""
    if not isinstance(url, str) or not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    changed = False
    netloc = parts.netloc
    query = parts.query

    if "@" in netloc:
        netloc = netloc.split("@", 1)[1]
        changed = True

    if query:
        pairs = parse_qsl(query, keep_blank_values=True)
        out_pairs = [(k, "<redacted>" if v and is_sensitive_key(k) else v) for k, v in pairs]
        if out_pairs != pairs:
            query = urlencode(out_pairs, doseq=True)
            changed = True

    fragment = parts.fragment
    if fragment and "=" in fragment:
        # Implicit-grant callbacks carry tokens in the fragment.
        pairs = parse_qsl(fragment, keep_blank_values=True)
        out_pairs = [(k, "<redacted>" if v and is_sensitive_key(k) else v) for k, v in pairs]
        if out_pairs != pairs:
            fragment = urlencode(out_pairs, doseq=True)
            changed = True

    if not changed:
        return url
    return urlunsplit((parts.scheme, netloc, parts.path, query, fragment))


def _redacted_summary(value: Any) -> str:
    if isinstance(value, str):
        return f"<redacted str len={len(value)}>"
    return "<redacted>"


def _shorten(value: str, max_chars: int | None) -> str:
    value = _DATA_URI_RE.sub(lambda m: f"<omitted image data len={len(m.group(0))}>", value)
    if max_chars is not None and len(value) > max_chars:
        return value[:max_chars] + f"… <truncated len={len(value)}>"
    return value


def _redact_any(value: Any, *, key: str | None, max_chars: int | None) -> Any:
    if isinstance(value, dict):
        return {k: _redact_any(v, key=str(k), max_chars=max_chars) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact_any(v, key=key, max_chars=max_chars) for v in value]
    if key is not None and is_sensitive_key(key):
        return _redacted_summary(value)
    if isinstance(value, str):
        # Typed text may be a credential.
        if key == "text":
            return _redacted_summary(value)
        if key in {"url", "source"} and value.startswith(("http://", "https://")):
            return redact_url(value)
        return _shorten(value, max_chars)
    return value


def redact_tool_arguments(tool: str, args: Any) -> Any:
    """Redact tool arguments for safe logging."""
    return _redact_any(args, key=None, max_chars=_LOG_MAX_CHARS)


def redact_jsonrpc_for_log(payload: dict[str, Any]) -> dict[str, Any]:
    return redact_jsonrpc_for_dump(payload, max_text_chars=_LOG_MAX_CHARS)


def redact_jsonrpc_for_dump(payload: dict[str, Any], *, max_text_chars: int | None = None) -> dict[str, Any]:
    """Redact a JSON-RPC message for file dumps.

    - Tool call arguments are redacted like log arguments.
    - Screenshot data URIs inside result text are replaced with a placeholder.
    - Large text blobs can be truncated.
    """
    max_text_chars = max_text_chars if max_text_chars is not None else _dump_max_chars()
    msg = dict(payload)

    if msg.get("method") in {"tools/call", "call_tool"} and isinstance(msg.get("params"), dict):
        params = dict(msg["params"])
        if "arguments" in params:
            params["arguments"] = _redact_any(params["arguments"], key=None, max_chars=max_text_chars)
        msg["params"] = params

    result = msg.get("result")
    if isinstance(result, dict) and isinstance(result.get("content"), list):
        content = []
        for item in result["content"]:
            if isinstance(item, dict) and isinstance(item.get("text"), str):
                item = {**item, "text": _shorten(item["text"], max_text_chars)}
            content.append(item)
        msg["result"] = {**result, "content": content}

    return msg


__all__ = [
    "is_sensitive_key",
    "redact_jsonrpc_for_dump",
    "redact_jsonrpc_for_log",
    "redact_tool_arguments",
    "redact_url",
]
