"""
Lint tool handler.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ... import tools as scanner_tools
from ..guards import LintArgs, parse_lint_args
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ScannerConfig
    from ...launcher import BrowserLauncher

logger = logging.getLogger("mcp.local_scanner.handlers")


def handle_lint_code(config: ScannerConfig, launcher: BrowserLauncher, args: LintArgs) -> ToolResult:
    try:
        result = scanner_tools.lint_file(config, args.file_path, language=args.language)
    except Exception as exc:  # noqa: BLE001
        logger.info("tool_error tool=lint_code reason=%s", exc)
        return ToolResult.error(f"Error linting code: {exc}")
    return ToolResult.json(result)


LINT_HANDLERS: dict[str, tuple] = {
    "lint_code": (parse_lint_args, handle_lint_code),
}
