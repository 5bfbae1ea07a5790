"""
Page tool handlers - scan and screenshot localhost pages.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ... import tools as scanner_tools
from ...tools.scan import DEFAULT_WAIT_MS
from ..guards import ScanArgs, ScreenshotArgs, parse_scan_args, parse_screenshot_args
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ScannerConfig
    from ...launcher import BrowserLauncher

logger = logging.getLogger("mcp.local_scanner.handlers")


def _wait_ms(wait_time: float | None) -> float:
    # Zero or missing means the default settle time.
    return wait_time or DEFAULT_WAIT_MS


def handle_scan_localhost(config: ScannerConfig, launcher: BrowserLauncher, args: ScanArgs) -> ToolResult:
    try:
        result = scanner_tools.scan_page(
            config,
            launcher,
            args.url,
            wait_ms=_wait_ms(args.wait_time),
            actions=args.actions,
        )
    except Exception as exc:  # noqa: BLE001
        logger.info("tool_error tool=scan_localhost reason=%s", exc)
        return ToolResult.error(f"Error scanning localhost: {exc}")
    return ToolResult.json(result)


def handle_screenshot_localhost(config: ScannerConfig, launcher: BrowserLauncher, args: ScreenshotArgs) -> ToolResult:
    try:
        result = scanner_tools.screenshot_page(
            config,
            launcher,
            args.url,
            full_page=args.full_page,
            wait_ms=_wait_ms(args.wait_time),
        )
    except Exception as exc:  # noqa: BLE001
        logger.info("tool_error tool=screenshot_localhost reason=%s", exc)
        return ToolResult.error(f"Error taking screenshot: {exc}")
    return ToolResult.json(result)


PAGE_HANDLERS: dict[str, tuple] = {
    "scan_localhost": (parse_scan_args, handle_scan_localhost),
    "screenshot_localhost": (parse_screenshot_args, handle_screenshot_localhost),
}
