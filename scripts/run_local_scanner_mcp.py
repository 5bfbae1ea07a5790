#!/usr/bin/env python3
import os
import sys

print(
    f"[mcp] binary={os.environ.get('MCP_BROWSER_BINARY', 'auto')} | "
    f"port={os.environ.get('MCP_BROWSER_PORT', '9222')} | "
    f"mode={os.environ.get('MCP_BROWSER_MODE', 'launch')} | "
    f"validator={os.environ.get('MCP_HTML_VALIDATOR_URL', 'default')}",
    file=sys.stderr,
)

from mcp_servers.local_scanner.main import main  # noqa: E402

if __name__ == "__main__":
    main()
