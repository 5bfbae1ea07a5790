"""
HTML validation tool handler.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ... import tools as scanner_tools
from ..guards import ValidateHtmlArgs, parse_validate_html_args
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ScannerConfig
    from ...launcher import BrowserLauncher

logger = logging.getLogger("mcp.local_scanner.handlers")


def handle_validate_html(config: ScannerConfig, launcher: BrowserLauncher, args: ValidateHtmlArgs) -> ToolResult:
    try:
        result = scanner_tools.validate_source(config, launcher, args.source, is_url=args.is_url)
    except Exception as exc:  # noqa: BLE001
        logger.info("tool_error tool=validate_html reason=%s", exc)
        return ToolResult.error(f"Error validating HTML: {exc}")
    return ToolResult.json(result)


HTML_HANDLERS: dict[str, tuple] = {
    "validate_html": (parse_validate_html_args, handle_validate_html),
}
