"""Tool catalog: the four tool descriptors served on tools/list."""

from __future__ import annotations

from typing import Any

SCAN_LOCALHOST_TOOL: dict[str, Any] = {
    "name": "scan_localhost",
    "description": "Access a localhost URL, capture console logs, and check for runtime errors",
    "inputSchema": {
        "type": "object",
        "properties": {
            "url": {
                "type": "string",
                "description": "Localhost URL to scan (must start with http://localhost or https://localhost)",
            },
            "waitTime": {
                "type": "number",
                "description": "Time to wait in milliseconds after page load (default: 1000)",
            },
            "actions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "enum": ["click", "type", "wait"],
                            "description": "Type of action to perform",
                        },
                        "selector": {
                            "type": "string",
                            "description": "CSS selector for click or type actions",
                        },
                        "text": {
                            "type": "string",
                            "description": "Text to type for type actions",
                        },
                        "time": {
                            "type": "number",
                            "description": "Time to wait in milliseconds for wait actions",
                        },
                    },
                    "required": ["type"],
                },
                "description": "List of actions to perform on the page",
            },
        },
        "required": ["url"],
    },
}

SCREENSHOT_LOCALHOST_TOOL: dict[str, Any] = {
    "name": "screenshot_localhost",
    "description": "Take a screenshot of a localhost URL",
    "inputSchema": {
        "type": "object",
        "properties": {
            "url": {
                "type": "string",
                "description": "Localhost URL to screenshot (must start with http://localhost or https://localhost)",
            },
            "fullPage": {
                "type": "boolean",
                "description": "Whether to take a full page screenshot (default: false)",
            },
            "waitTime": {
                "type": "number",
                "description": "Time to wait in milliseconds after page load (default: 1000)",
            },
        },
        "required": ["url"],
    },
}

LINT_CODE_TOOL: dict[str, Any] = {
    "name": "lint_code",
    "description": "Lint JavaScript, TypeScript, or CSS code files",
    "inputSchema": {
        "type": "object",
        "properties": {
            "filePath": {
                "type": "string",
                "description": "Path to the file to lint",
            },
            "language": {
                "type": "string",
                "enum": ["javascript", "typescript", "css"],
                "description": "Language of the file (default: auto-detect from file extension)",
            },
        },
        "required": ["filePath"],
    },
}

VALIDATE_HTML_TOOL: dict[str, Any] = {
    "name": "validate_html",
    "description": "Validate HTML content or URL for standards compliance",
    "inputSchema": {
        "type": "object",
        "properties": {
            "source": {
                "type": "string",
                "description": "HTML content or URL to validate",
            },
            "isUrl": {
                "type": "boolean",
                "description": "Whether the source is a URL (default: false)",
            },
        },
        "required": ["source"],
    },
}

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    SCAN_LOCALHOST_TOOL,
    SCREENSHOT_LOCALHOST_TOOL,
    LINT_CODE_TOOL,
    VALIDATE_HTML_TOOL,
]

TOOL_NAMES: tuple[str, ...] = tuple(t["name"] for t in TOOL_DEFINITIONS)
