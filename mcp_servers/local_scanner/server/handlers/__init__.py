"""
Tool handlers organized by domain.

Each handler takes (config, launcher, parsed_args) and returns a ToolResult.
Failures inside a handler come back as ToolResult.error (isError=true); only
the registry raises protocol errors.
"""

from .html import HTML_HANDLERS
from .lint import LINT_HANDLERS
from .page import PAGE_HANDLERS

# Aggregate all handlers
ALL_HANDLERS: dict[str, tuple] = {
    **PAGE_HANDLERS,
    **LINT_HANDLERS,
    **HTML_HANDLERS,
}

__all__ = ["ALL_HANDLERS", "HTML_HANDLERS", "LINT_HANDLERS", "PAGE_HANDLERS"]
