"""
Base utilities for scanner tools.

Provides:
- SmartToolError: Structured errors for AI agents
- is_localhost_url: the localhost URL rule shared by guards and tools
- get_session: browser session context manager with guaranteed release
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..session import BrowserSession, session_manager

if TYPE_CHECKING:
    from ..config import ScannerConfig
    from ..launcher import BrowserLauncher

LOCALHOST_PREFIXES = ("http://localhost", "https://localhost")


def is_localhost_url(url: str) -> bool:
    return url.startswith(LOCALHOST_PREFIXES)


# Error Handling
@dataclass
class SmartToolError(Exception):
    """Structured error with context for AI agents."""

    tool: str
    action: str
    reason: str
    suggestion: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.reason


@contextmanager
def get_session(
    config: ScannerConfig,
    launcher: BrowserLauncher,
    timeout: float = 10.0,
) -> Generator[BrowserSession, None, None]:
    """Context manager for a browser session with automatic cleanup.

    Usage:
        with get_session(config, launcher) as session:
            session.navigate(url)
    """
    with session_manager.open_session(config, launcher, timeout) as session:
        yield session
