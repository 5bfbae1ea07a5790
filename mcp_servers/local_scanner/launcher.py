from __future__ import annotations

import contextlib
import logging
import os
import socket
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

from .config import ScannerConfig, expand_path

logger = logging.getLogger("mcp.local_scanner.launcher")


@dataclass
class LaunchResult:
    command: list[str]
    started: bool
    message: str


class BrowserLauncher:
    def __init__(self, config: ScannerConfig | None = None) -> None:
        self.config = config or ScannerConfig.from_env()
        self.process: subprocess.Popen | None = None

    def cdp_ready(self, timeout: float = 0.4) -> bool:
        """Return True if the CDP HTTP endpoint responds."""
        return self._cdp_ready(timeout=timeout)

    def stop(self, *, timeout: float = 2.0) -> bool:
        """Best-effort stop of the launcher-owned Chrome process."""
        proc = self.process
        if proc is None:
            return False
        self.process = None
        if proc.poll() is not None:
            return True

        with contextlib.suppress(OSError):
            proc.terminate()
        try:
            proc.wait(timeout=max(0.1, float(timeout)))
        except subprocess.TimeoutExpired:
            # Escalate to kill.
            with contextlib.suppress(OSError):
                proc.kill()
        logger.info("browser_stopped pid=%s", proc.pid)
        return True

    def _build_common_flags(self) -> list[str]:
        flags = [
            f"--remote-debugging-port={self.config.cdp_port}",
            f"--user-data-dir={expand_path(self.config.profile_path)}",
            "--remote-allow-origins=*",
            "--no-first-run",
            "--no-default-browser-check",
            "--disable-dev-shm-usage",
        ]

        headless = os.environ.get("MCP_HEADLESS", "1") == "1"
        if headless:
            flags.append("--headless=new")
        else:
            window_size = os.environ.get("MCP_WINDOW_SIZE", "1280,900")
            flags.append(f"--window-size={window_size}")

        return flags

    def build_launch_command(self, extra: list[str] | None = None) -> list[str]:
        flags = self._build_common_flags() + self.config.extra_flags
        if extra:
            flags.extend(extra)
        return [self.config.binary_path, *flags, "about:blank"]

    def _port_available(self, timeout: float = 0.2) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            try:
                result = sock.connect_ex(("127.0.0.1", self.config.cdp_port))
                return result != 0
            except OSError:
                return False

    def _cdp_ready(self, timeout: float = 0.4) -> bool:
        endpoint = f"http://127.0.0.1:{self.config.cdp_port}/json/version"
        try:
            with urlopen(endpoint, timeout=timeout) as resp:
                return resp.status == 200
        except (OSError, TimeoutError, URLError):
            return False

    def ensure_running(self, timeout: float = 10.0) -> LaunchResult:
        if self.config.mode == "attach":
            if self._cdp_ready():
                return LaunchResult([], False, "Attached to existing Chrome on CDP port")
            return LaunchResult(
                [],
                False,
                f"Attach mode: no Chrome listening on CDP port {self.config.cdp_port} "
                "(start Chrome with --remote-debugging-port)",
            )

        if self._cdp_ready():
            return LaunchResult([], False, "Chrome already listening on CDP port")

        if not self._port_available():
            return LaunchResult([], False, f"Port {self.config.cdp_port} already in use")

        with contextlib.suppress(OSError):
            Path(expand_path(self.config.profile_path)).mkdir(parents=True, exist_ok=True)

        cmd = self.build_launch_command()
        try:
            self.process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            return LaunchResult(cmd, False, str(exc))

        logger.info("browser_launch cmd=%s", cmd[0])
        deadline = time.time() + timeout
        while time.time() < deadline:
            if self._cdp_ready():
                return LaunchResult(cmd, True, "Chrome launched")
            time.sleep(0.1)
        return LaunchResult(cmd, False, "Chrome launch timed out")
