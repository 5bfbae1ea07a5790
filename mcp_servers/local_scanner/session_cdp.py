"""Raw Chrome DevTools Protocol connection over websocket-client."""

from __future__ import annotations

import json
import socket
import time
from collections.abc import Callable
from contextlib import suppress
from typing import Any

import websocket

from .http_client import HttpClientError


def _is_timeout(exc: Exception) -> bool:
    msg = str(exc).lower()
    if isinstance(exc, (TimeoutError, BlockingIOError, websocket.WebSocketTimeoutException)):
        return True
    return "timed out" in msg or "would block" in msg or "temporarily unavailable" in msg


class CdpConnection:
    """Low-level CDP WebSocket connection."""

    def __init__(self, ws_url: str, timeout: float = 5.0):
        self.ws = websocket.create_connection(ws_url, timeout=timeout)
        self.ws_url = ws_url
        self.timeout = timeout
        self._next_id = 1
        # CDP is event-heavy. We must not drop events while waiting for command responses.
        self._event_queue: list[dict[str, Any]] = []
        self._max_event_queue = 2000
        self._event_sink: Callable[[dict[str, Any]], None] | None = None

    def set_event_sink(self, sink: Callable[[dict[str, Any]], None] | None) -> None:
        """Attach a sink called exactly once for every received CDP event."""
        self._event_sink = sink

    def _push_event(self, event: dict[str, Any]) -> None:
        """Store an event for later consumption (bounded)."""
        if not isinstance(event.get("method"), str):
            return

        sink = self._event_sink
        if sink is not None:
            sink(event)

        self._event_queue.append(event)
        if len(self._event_queue) > self._max_event_queue:
            del self._event_queue[: len(self._event_queue) - self._max_event_queue]

    def pop_event(self, event_name: str) -> dict[str, Any] | None:
        """Pop the oldest queued event params for the given event name."""
        for i, ev in enumerate(self._event_queue):
            if ev.get("method") == event_name:
                self._event_queue.pop(i)
                params = ev.get("params")
                return params if isinstance(params, dict) else {}
        return None

    def _recv_json(self, timeout: float) -> dict[str, Any] | None:
        """Receive one decoded frame, or None when nothing arrived in time."""
        try:
            self.ws.settimeout(timeout)
            raw = self.ws.recv()
        except Exception as exc:  # noqa: BLE001
            if _is_timeout(exc):
                return None
            raise HttpClientError(str(exc)) from exc
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def _is_event(data: dict[str, Any]) -> bool:
        return isinstance(data.get("method"), str) and "id" not in data

    def drain_events(self, *, max_messages: int = 500) -> int:
        """Store already-buffered CDP events without blocking."""
        drained = 0
        for _ in range(max(0, int(max_messages))):
            data = self._recv_json(0.0)
            if data is None or not self._is_event(data):
                break
            self._push_event(data)
            drained += 1
        return drained

    def pump(self, seconds: float) -> None:
        """Keep receiving events for `seconds` (used for settle delays)."""
        deadline = time.time() + max(0.0, float(seconds))
        while True:
            remaining = deadline - time.time()
            if remaining <= 0:
                break
            data = self._recv_json(min(0.5, remaining))
            if data is not None and self._is_event(data):
                self._push_event(data)
        self.drain_events()

    def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send CDP command and wait for response."""
        msg_id = self._next_id
        self._next_id += 1

        msg: dict[str, Any] = {"id": msg_id, "method": method}
        if params:
            msg["params"] = params

        try:
            self.ws.settimeout(min(2.0, max(0.5, float(self.timeout))))
            self.ws.send(json.dumps(msg))
        except Exception as exc:  # noqa: BLE001
            raise HttpClientError(str(exc)) from exc

        return self._recv_until(msg_id, method)

    def send_many(self, commands: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Send multiple CDP commands sequentially."""
        return [self.send(cmd["method"], cmd.get("params")) for cmd in commands]

    def _recv_until(self, expected_id: int, method: str) -> dict[str, Any]:
        """Wait for response with specific ID."""
        deadline = time.time() + self.timeout
        while True:
            remaining = deadline - time.time()
            if remaining <= 0:
                raise HttpClientError(f"CDP response timed out ({method})")

            data = self._recv_json(min(0.5, remaining))
            if data is None:
                continue

            # CDP event: store and keep waiting for the command response.
            if self._is_event(data):
                self._push_event(data)
                continue

            if data.get("id") == expected_id:
                if "error" in data:
                    error = data["error"]
                    message = error.get("message") if isinstance(error, dict) else error
                    raise HttpClientError(f"{method}: {message}")
                return data.get("result", {})

    def wait_for_event(
        self,
        event_name: str,
        timeout: float = 10.0,
        predicate: Callable[[dict[str, Any]], bool] | None = None,
    ) -> dict | None:
        """Wait for a specific CDP event, optionally matching a predicate on its params."""
        while True:
            queued = self.pop_event(event_name)
            if queued is None:
                break
            if predicate is None or predicate(queued):
                return queued

        deadline = time.time() + timeout
        while True:
            remaining = deadline - time.time()
            if remaining <= 0:
                return None

            data = self._recv_json(min(0.5, remaining))
            if data is None or not self._is_event(data):
                continue

            if data.get("method") == event_name:
                sink = self._event_sink
                if sink is not None:
                    sink(data)
                params = data.get("params")
                params = params if isinstance(params, dict) else {}
                if predicate is None or predicate(params):
                    return params
                continue
            self._push_event(data)

    def abort(self) -> None:
        """Best-effort hard break of the underlying socket."""
        sock = getattr(self.ws, "sock", None)
        if sock is not None:
            with suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)
            with suppress(OSError):
                sock.close()

    def close(self) -> None:
        """Close the WebSocket connection."""
        # Prefer a raw-socket shutdown: a graceful close handshake can hang on a wedged tab.
        self.abort()


__all__ = ["CdpConnection"]
