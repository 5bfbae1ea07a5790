"""
Scanner tool implementations.

Each function takes the server configuration (and the browser launcher when a
page has to be rendered) and returns a JSON-serializable dict. Failures raise
SmartToolError, HttpClientError or SelectorNotFoundError; the handlers turn
them into tool-level error responses.
"""

from .base import SmartToolError, get_session, is_localhost_url
from .html_validator import check_html, resolve_html, validate_source
from .lint import lint_file, resolve_language
from .scan import render_html, scan_page, screenshot_page

__all__ = [
    "SmartToolError",
    "check_html",
    "get_session",
    "is_localhost_url",
    "lint_file",
    "render_html",
    "resolve_html",
    "resolve_language",
    "scan_page",
    "screenshot_page",
    "validate_source",
]
