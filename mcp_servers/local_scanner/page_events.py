"""Ordered capture of console messages and uncaught page errors.

Fed from the CDP event sink of a page connection: every `Runtime.consoleAPICalled`
and `Runtime.exceptionThrown` event is recorded in emission order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _str(x: Any, *, max_len: int = 4000) -> str:
    s = str(x)
    if len(s) <= max_len:
        return s
    return s[:max_len] + f"… <truncated len={len(s)}>"


def _remote_obj_to_str(obj: Any) -> str:
    """Best-effort conversion of CDP RemoteObject to short string."""
    if not isinstance(obj, dict):
        return _str(obj)
    for k in ("value", "unserializableValue", "description"):
        if k in obj and obj.get(k) is not None:
            return _str(obj.get(k))
    # Fallback: type/subtype preview
    typ = obj.get("type")
    subtype = obj.get("subtype")
    return _str(f"<{typ}{('/' + subtype) if subtype else ''}>")


def console_entry(params: dict[str, Any]) -> dict[str, str]:
    level = params.get("type")
    if level == "warning":
        level = "warn"
    level = level if isinstance(level, str) else "log"
    args = params.get("args")
    message = " ".join(_remote_obj_to_str(a) for a in args) if isinstance(args, list) else ""
    return {"type": level, "message": message}


def exception_message(params: dict[str, Any]) -> str:
    """The thrown error's message, without its class name or stack trace."""
    details = params.get("exceptionDetails")
    if not isinstance(details, dict):
        details = {}
    msg = details.get("text") or "Uncaught exception"
    exception = details.get("exception")
    if isinstance(exception, dict):
        description = exception.get("description")
        if isinstance(description, str) and description:
            # Error descriptions are "<ClassName>: <message>\n    at ..." (the stack).
            msg = description.split("\n", 1)[0]
            prefix = f"{exception.get('className')}: "
            if exception.get("className") and msg.startswith(prefix):
                msg = msg[len(prefix) :]
        elif exception.get("value") is not None:
            msg = exception.get("value")
    return _str(msg)


@dataclass
class PageEventLog:
    """Console log entries and page errors, each list in emission order."""

    logs: list[dict[str, str]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def __call__(self, event: dict[str, Any]) -> None:
        method = event.get("method")
        params = event.get("params")
        if not isinstance(params, dict):
            params = {}
        if method == "Runtime.consoleAPICalled":
            self.logs.append(console_entry(params))
        elif method == "Runtime.exceptionThrown":
            self.errors.append(exception_message(params))
