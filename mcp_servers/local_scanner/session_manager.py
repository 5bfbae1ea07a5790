"""Per-call browser sessions.

Every tool call that needs a browser gets its own browser context (separate
cookies, storage and cache), one tab inside it and its own websocket. All three
are released when the `open_session` block exits, whatever the outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager, suppress
from typing import TYPE_CHECKING, Any

from .browser_session import BrowserSession
from .http_client import HttpClientError
from .session_cdp import CdpConnection
from .session_helpers import _http_get_json

if TYPE_CHECKING:
    from .config import ScannerConfig
    from .launcher import BrowserLauncher

logger = logging.getLogger("mcp.local_scanner.session")

ConnectionFactory = Callable[[str, float], CdpConnection]


class SessionManager:
    """Creates and tears down isolated tab sessions."""

    def __init__(self, connection_factory: ConnectionFactory | None = None) -> None:
        self.connection_factory: ConnectionFactory = connection_factory or CdpConnection

    def _get_targets(self, config: ScannerConfig) -> list:
        """Get list of browser targets."""
        try:
            return _http_get_json(f"http://127.0.0.1:{config.cdp_port}/json/list") or []
        except HttpClientError:
            return []

    def _get_browser_ws(self, config: ScannerConfig) -> str:
        """Get browser-level WebSocket URL."""
        version = _http_get_json(f"http://127.0.0.1:{config.cdp_port}/json/version")
        ws_url = version.get("webSocketDebuggerUrl") if isinstance(version, dict) else None
        if not ws_url:
            raise HttpClientError("CDP browser WebSocket URL not found")
        return ws_url

    def _get_tab_ws_url(self, config: ScannerConfig, tab_id: str) -> str:
        """Get WebSocket URL for specific tab."""
        for target in self._get_targets(config):
            if target.get("id") == tab_id and target.get("webSocketDebuggerUrl"):
                return target["webSocketDebuggerUrl"]
        return f"ws://127.0.0.1:{config.cdp_port}/devtools/page/{tab_id}"

    def _browser_call(self, config: ScannerConfig, method: str, params: dict[str, Any], timeout: float) -> dict:
        """One command over a short-lived browser-level connection."""
        conn = self.connection_factory(self._get_browser_ws(config), timeout)
        try:
            return conn.send(method, params)
        finally:
            conn.close()

    def _create_context(self, config: ScannerConfig) -> str:
        """Create a throwaway browser context (its own cookies, storage and cache)."""
        result = self._browser_call(config, "Target.createBrowserContext", {}, 5.0)
        context_id = result.get("browserContextId")
        if not context_id:
            raise HttpClientError("Failed to create browser context")
        return context_id

    def _dispose_context(self, config: ScannerConfig, context_id: str) -> None:
        self._browser_call(config, "Target.disposeBrowserContext", {"browserContextId": context_id}, 3.0)

    def _create_tab(self, config: ScannerConfig, context_id: str, url: str = "about:blank") -> str:
        """Create a new tab inside the given browser context, return tab ID."""
        result = self._browser_call(
            config, "Target.createTarget", {"url": url, "browserContextId": context_id}, 5.0
        )
        tab_id = result.get("targetId")
        if not tab_id:
            raise HttpClientError("Failed to create browser tab")
        return tab_id

    def _close_tab(self, config: ScannerConfig, tab_id: str) -> None:
        self._browser_call(config, "Target.closeTarget", {"targetId": tab_id}, 3.0)

    def _ensure_browser(self, launcher: BrowserLauncher) -> None:
        launch = launcher.ensure_running()
        if launch.started:
            logger.info("browser_ready message=%s", launch.message)
        if not launcher.cdp_ready(timeout=1.0):
            raise HttpClientError(f"Browser is not reachable on CDP port {launcher.config.cdp_port}: {launch.message}")

    @contextmanager
    def open_session(
        self,
        config: ScannerConfig,
        launcher: BrowserLauncher,
        timeout: float = 10.0,
    ) -> Generator[BrowserSession, None, None]:
        """Open a tab in a fresh browser context; both are released exactly once when the block exits.

        Nothing a page stores (cookies, storage, HTTP cache) outlives the call.
        """
        self._ensure_browser(launcher)
        context_id = self._create_context(config)
        tab_id: str | None = None
        sess: BrowserSession | None = None
        try:
            tab_id = self._create_tab(config, context_id)
            logger.info("session_open tab=%s context=%s", tab_id, context_id)
            conn = self.connection_factory(self._get_tab_ws_url(config, tab_id), timeout)
            sess = BrowserSession(conn, tab_id)
            yield sess
        finally:
            if sess is not None:
                sess.close()
            # A failed cleanup must not mask the tool's own outcome.
            if tab_id is not None:
                with suppress(HttpClientError, OSError):
                    self._close_tab(config, tab_id)
            with suppress(HttpClientError, OSError):
                self._dispose_context(config, context_id)
            logger.info("session_closed tab=%s context=%s", tab_id, context_id)


session_manager = SessionManager()

__all__ = ["SessionManager", "session_manager"]
