"""
Page tools for localhost apps.

Provides:
- scan_page: navigate, replay actions, collect console output/errors, screenshot
- screenshot_page: navigate and capture a PNG
- render_html: navigate and return the rendered DOM
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..session import PageEventLog
from .base import SmartToolError, get_session

if TYPE_CHECKING:
    from ..config import ScannerConfig
    from ..launcher import BrowserLauncher
    from ..session import BrowserSession
    from ..server.guards import ScanAction

DEFAULT_WAIT_MS = 1000


def png_data_uri(data_b64: str) -> str:
    return f"data:image/png;base64,{data_b64}"


def _replay_action(session: BrowserSession, action: ScanAction, index: int) -> None:
    if action.type == "wait":
        session.wait_for(action.time or DEFAULT_WAIT_MS)
        return
    if not action.selector:
        raise SmartToolError(
            tool="scan_localhost",
            action=action.type,
            reason=f"Action #{index + 1} ({action.type}) requires a selector",
            suggestion="Provide a CSS selector for click/type actions",
        )
    if action.type == "click":
        session.click_selector(action.selector)
    elif action.type == "type":
        if action.text is None:
            raise SmartToolError(
                tool="scan_localhost",
                action="type",
                reason=f"Action #{index + 1} (type) requires text",
                suggestion="Provide the text to type",
            )
        session.type_into(action.selector, action.text)


def scan_page(
    config: ScannerConfig,
    launcher: BrowserLauncher,
    url: str,
    wait_ms: float = DEFAULT_WAIT_MS,
    actions: list[ScanAction] | tuple[ScanAction, ...] = (),
) -> dict[str, Any]:
    """Load a page, replay actions in order and report what the page printed.

    Console messages and uncaught errors are collected over the whole visit
    (navigation and actions). The first failing action aborts the scan.
    """
    events = PageEventLog()
    with get_session(config, launcher) as session:
        session.conn.set_event_sink(events)
        session.enable_runtime()
        session.navigate(url, timeout=config.navigation_timeout)
        session.wait_for(wait_ms)

        for index, action in enumerate(actions):
            _replay_action(session, action, index)

        session.drain_events()
        screenshot = session.screenshot()

    return {
        "url": url,
        "logs": events.logs,
        "errors": events.errors,
        "screenshot": png_data_uri(screenshot),
    }


def screenshot_page(
    config: ScannerConfig,
    launcher: BrowserLauncher,
    url: str,
    full_page: bool = False,
    wait_ms: float = DEFAULT_WAIT_MS,
) -> dict[str, Any]:
    """Load a page and capture it (viewport, or the whole document)."""
    with get_session(config, launcher) as session:
        session.navigate(url, timeout=config.navigation_timeout)
        session.wait_for(wait_ms)
        data = session.full_page_screenshot() if full_page else session.screenshot()
    return {"url": url, "screenshot": png_data_uri(data)}


def render_html(config: ScannerConfig, launcher: BrowserLauncher, url: str) -> str:
    """Return the fully rendered DOM of a page."""
    with get_session(config, launcher) as session:
        session.navigate(url, timeout=config.navigation_timeout)
        return session.content()
