"""Session subsystem.

- session_cdp.py: raw CDP connection
- browser_session.py: BrowserSession wrapper
- page_events.py: console / page-error capture
- session_manager.py: per-call tab lifecycle

`session.py` remains the stable import surface (re-exports).
"""

from __future__ import annotations

from .browser_session import BrowserSession, SelectorNotFoundError
from .page_events import PageEventLog
from .session_cdp import CdpConnection
from .session_manager import SessionManager, session_manager

__all__ = [
    "BrowserSession",
    "CdpConnection",
    "PageEventLog",
    "SelectorNotFoundError",
    "SessionManager",
    "session_manager",
]
