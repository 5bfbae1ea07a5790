from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_BINARY_CANDIDATES: list[str] = [
    # Prefer Chromium for better compatibility.
    # IMPORTANT: Avoid snap versions - they ignore --user-data-dir!
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/local/bin/chromium",
    "/opt/chromium/chromium",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
    "C:\\Program Files\\Chromium\\Application\\chrome.exe",
    "C:\\Program Files (x86)\\Chromium\\Application\\chrome.exe",
    # Chrome entries kept as fallback.
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/usr/bin/google-chrome",
    "/usr/bin/google-chrome-stable",
    "/opt/google/chrome/chrome",
    "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
    "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
    "/snap/bin/chromium",
]

DEFAULT_VALIDATOR_URL = "https://validator.w3.org/nu/?out=json"


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name) or default)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name) or default)
    except ValueError:
        return default


def _env_command(name: str, default: str) -> list[str]:
    raw = (os.environ.get(name) or "").strip()
    return shlex.split(raw) if raw else [default]


@dataclass
class ScannerConfig:
    binary_path: str
    profile_path: str
    cdp_port: int = 9222
    mode: str = "launch"
    extra_flags: list[str] = field(default_factory=list)
    allow_hosts: list[str] = field(default_factory=list)
    http_timeout: float = 10.0
    http_max_bytes: int = 1_000_000
    navigation_timeout: float = 30.0
    eslint_command: list[str] = field(default_factory=lambda: ["eslint"])
    stylelint_command: list[str] = field(default_factory=lambda: ["stylelint"])
    lint_timeout: float = 60.0
    validator_url: str = DEFAULT_VALIDATOR_URL

    @staticmethod
    def normalize_mode(raw: str | None) -> str:
        mode = (raw or "").strip().lower()
        if mode in {"attach", "connect", "external"}:
            return "attach"
        return "launch"

    @classmethod
    def detect_binary(cls) -> str:
        env_path = os.environ.get("MCP_BROWSER_BINARY")
        if env_path:
            return expand_path(env_path)
        for candidate in DEFAULT_BINARY_CANDIDATES:
            path = Path(candidate)
            if path.exists() and os.access(str(path), os.X_OK):
                return str(path)
        # Last resort: rely on PATH lookup
        return "google-chrome"

    @classmethod
    def from_env(cls) -> ScannerConfig:
        mode = cls.normalize_mode(os.environ.get("MCP_BROWSER_MODE"))
        profile = expand_path(os.environ.get("MCP_BROWSER_PROFILE", "~/.cache/local-scanner/browser-profile"))
        flags_raw = os.environ.get("MCP_BROWSER_FLAGS", "")
        extra_flags = [flag.strip() for flag in flags_raw.split(",") if flag.strip()]
        allow_raw = os.environ.get("MCP_ALLOW_HOSTS", "")
        allow_hosts = [host.strip().lower() for host in allow_raw.split(",") if host.strip() and host.strip() != "*"]
        return cls(
            binary_path=cls.detect_binary(),
            profile_path=profile,
            cdp_port=_env_int("MCP_BROWSER_PORT", 9222),
            mode=mode,
            extra_flags=extra_flags,
            allow_hosts=allow_hosts,
            http_timeout=_env_float("MCP_HTTP_TIMEOUT", 10.0),
            http_max_bytes=_env_int("MCP_HTTP_MAX_BYTES", 1_000_000),
            navigation_timeout=_env_float("MCP_NAV_TIMEOUT", 30.0),
            eslint_command=_env_command("MCP_ESLINT_CMD", "eslint"),
            stylelint_command=_env_command("MCP_STYLELINT_CMD", "stylelint"),
            lint_timeout=_env_float("MCP_LINT_TIMEOUT", 60.0),
            validator_url=(os.environ.get("MCP_HTML_VALIDATOR_URL") or "").strip() or DEFAULT_VALIDATOR_URL,
        )

    def is_host_allowed(self, host: str) -> bool:
        host = (host or "").strip().lower().rstrip(".")
        if not self.allow_hosts:
            return True
        for raw_allowed in self.allow_hosts:
            allowed = (raw_allowed or "").strip().lower().lstrip(".").rstrip(".")
            if not allowed:
                continue
            if host == allowed:
                return True
            if host.endswith("." + allowed):
                return True
        return False
