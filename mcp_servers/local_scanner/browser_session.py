"""High-level page operations on top of a CDP tab connection."""

from __future__ import annotations

import json
from typing import Any

from .http_client import HttpClientError
from .session_cdp import CdpConnection

_ELEMENT_CENTER_JS = """(() => {
  const el = document.querySelector(%s);
  if (!el) return null;
  el.scrollIntoView({block: 'center', inline: 'center'});
  const r = el.getBoundingClientRect();
  return {x: r.left + r.width / 2, y: r.top + r.height / 2, width: r.width, height: r.height};
})()"""

_FOCUS_JS = """(() => {
  const el = document.querySelector(%s);
  if (!el) return false;
  el.scrollIntoView({block: 'center', inline: 'center'});
  el.focus();
  return true;
})()"""

_CONTENT_JS = """(() => {
  let out = '';
  const dt = document.doctype;
  if (dt) {
    out = '<!DOCTYPE ' + dt.name
      + (dt.publicId ? ' PUBLIC "' + dt.publicId + '"' : '')
      + (!dt.publicId && dt.systemId ? ' SYSTEM' : '')
      + (dt.systemId ? ' "' + dt.systemId + '"' : '')
      + '>';
  }
  if (document.documentElement) out += document.documentElement.outerHTML;
  return out;
})()"""


class SelectorNotFoundError(LookupError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"No element found for selector: {selector}")
        self.selector = selector


class BrowserSession:
    """
    High-level browser session for a specific tab.

    Wraps CdpConnection with the page operations the tools need.
    """

    def __init__(self, connection: CdpConnection, tab_id: str, tab_url: str = ""):
        self.conn = connection
        self.tab_id = tab_id
        self.tab_url = tab_url
        self._page_enabled = False
        self._runtime_enabled = False

    def close(self) -> None:
        """Close the session connection."""
        self.conn.close()

    def enable_page(self) -> None:
        """Enable Page domain plus lifecycle events (needed for network-idle waits)."""
        if self._page_enabled:
            return
        self.conn.send("Page.enable")
        self.conn.send("Page.setLifecycleEventsEnabled", {"enabled": True})
        self._page_enabled = True

    def enable_runtime(self) -> None:
        """Enable Runtime domain (console + exception events, JS evaluation)."""
        if self._runtime_enabled:
            return
        self.conn.send("Runtime.enable")
        self._runtime_enabled = True

    # ─────────────────────────────────────────────────────────────────────────
    # Navigation & waits
    # ─────────────────────────────────────────────────────────────────────────

    def navigate(self, url: str, timeout: float = 30.0) -> str:
        """Navigate to URL and wait until the main frame reaches network idle."""
        self.enable_page()
        result = self.conn.send("Page.navigate", {"url": url})
        error_text = result.get("errorText")
        if error_text:
            raise HttpClientError(f"{error_text} at {url}")

        frame_id = result.get("frameId")
        loader_id = result.get("loaderId")
        if loader_id:
            # Same-document navigations carry no loaderId and emit no new lifecycle.

            def _is_idle(params: dict[str, Any]) -> bool:
                return (
                    params.get("name") == "networkIdle"
                    and params.get("frameId") == frame_id
                    and params.get("loaderId") == loader_id
                )

            if self.conn.wait_for_event("Page.lifecycleEvent", timeout, predicate=_is_idle) is None:
                raise HttpClientError(f"Navigation timeout of {int(timeout * 1000)} ms exceeded")
        self.tab_url = url
        return url

    def wait_for(self, ms: float) -> None:
        """Wait `ms` milliseconds while still collecting page events."""
        self.conn.pump(max(0.0, float(ms)) / 1000.0)

    def drain_events(self) -> None:
        self.conn.drain_events()

    # ─────────────────────────────────────────────────────────────────────────
    # JavaScript
    # ─────────────────────────────────────────────────────────────────────────

    def eval_js(self, expression: str) -> Any:
        """Evaluate JavaScript and return its JSON value."""
        self.enable_runtime()
        result = self.conn.send(
            "Runtime.evaluate",
            {"expression": expression, "returnByValue": True, "awaitPromise": True},
        )
        details = result.get("exceptionDetails")
        if isinstance(details, dict):
            exception = details.get("exception")
            description = exception.get("description") if isinstance(exception, dict) else None
            raise HttpClientError(description or details.get("text") or "JavaScript evaluation failed")
        value = result.get("result")
        if not isinstance(value, dict):
            return None
        # CDP reports undefined/null without a "value" field.
        return value.get("value")

    # ─────────────────────────────────────────────────────────────────────────
    # Input
    # ─────────────────────────────────────────────────────────────────────────

    def click(self, x: float, y: float, button: str = "left", click_count: int = 1) -> None:
        """Click at coordinates."""
        self.conn.send_many(
            [
                {
                    "method": "Input.dispatchMouseEvent",
                    "params": {"type": "mouseMoved", "x": x, "y": y, "button": "none", "clickCount": 0},
                },
                {
                    "method": "Input.dispatchMouseEvent",
                    "params": {"type": "mousePressed", "x": x, "y": y, "button": button, "clickCount": click_count},
                },
                {
                    "method": "Input.dispatchMouseEvent",
                    "params": {"type": "mouseReleased", "x": x, "y": y, "button": button, "clickCount": click_count},
                },
            ]
        )

    def click_selector(self, selector: str) -> None:
        """Scroll the first matching element into view and click its centre."""
        box = self.eval_js(_ELEMENT_CENTER_JS % json.dumps(selector))
        if not isinstance(box, dict):
            raise SelectorNotFoundError(selector)
        if not box.get("width") or not box.get("height"):
            raise HttpClientError(f"Element is not visible: {selector}")
        self.click(float(box["x"]), float(box["y"]))

    def type_text(self, text: str) -> None:
        """Insert text into the focused element."""
        if not text:
            return
        self.conn.send("Input.insertText", {"text": str(text)})

    def type_into(self, selector: str, text: str) -> None:
        """Focus the first matching element and type text into it."""
        if not self.eval_js(_FOCUS_JS % json.dumps(selector)):
            raise SelectorNotFoundError(selector)
        self.type_text(text)

    # ─────────────────────────────────────────────────────────────────────────
    # Screenshots & DOM
    # ─────────────────────────────────────────────────────────────────────────

    def screenshot(
        self,
        format: str = "png",
        clip: dict | None = None,
        capture_beyond_viewport: bool = False,
    ) -> str:
        """Capture screenshot, return base64 data."""
        params: dict[str, Any] = {"format": format, "fromSurface": True}
        if clip:
            params["clip"] = clip
        if capture_beyond_viewport:
            params["captureBeyondViewport"] = True
        result = self.conn.send("Page.captureScreenshot", params)
        data = result.get("data")
        if not data:
            raise HttpClientError("Screenshot data is empty")
        return data

    def full_page_screenshot(self, format: str = "png") -> str:
        """Capture the whole document, not only the viewport."""
        metrics = self.conn.send("Page.getLayoutMetrics")
        size = metrics.get("cssContentSize") or metrics.get("contentSize") or {}
        width = max(1, int(size.get("width") or 0))
        height = max(1, int(size.get("height") or 0))
        clip = {"x": 0, "y": 0, "width": width, "height": height, "scale": 1}
        return self.screenshot(format, clip=clip, capture_beyond_viewport=True)

    def content(self) -> str:
        """Serialized DOM of the rendered page, doctype included."""
        return self.eval_js(_CONTENT_JS) or ""


__all__ = ["BrowserSession", "SelectorNotFoundError"]
