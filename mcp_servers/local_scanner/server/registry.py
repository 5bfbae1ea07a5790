"""
Tool registry: exact-name dispatch with argument guards in front of every handler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .guards import GuardError
from .types import INVALID_PARAMS, METHOD_NOT_FOUND, ProtocolError, ToolResult

if TYPE_CHECKING:
    from ..config import ScannerConfig
    from ..launcher import BrowserLauncher

logger = logging.getLogger("mcp.local_scanner.registry")

GuardFunc = Callable[[Any], Any]
HandlerFunc = Callable[["ScannerConfig", "BrowserLauncher", Any], ToolResult]


@dataclass(slots=True, frozen=True)
class ToolSpec:
    """A registered tool: its argument guard and its handler."""

    name: str
    guard: GuardFunc
    handler: HandlerFunc


class ToolRegistry:
    """Registry for tool handlers."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, name: str, guard: GuardFunc, handler: HandlerFunc) -> None:
        """Register a tool handler behind its guard."""
        self._tools[name] = ToolSpec(name=name, guard=guard, handler=handler)

    def register_many(self, handlers: dict[str, tuple[GuardFunc, HandlerFunc]]) -> None:
        """Register multiple handlers at once."""
        for name, (guard, handler) in handlers.items():
            self.register(name, guard, handler)

    def dispatch(
        self,
        name: str,
        config: ScannerConfig,
        launcher: BrowserLauncher,
        arguments: Any,
    ) -> ToolResult:
        """Validate arguments and run the tool.

        Raises ProtocolError for an unknown tool (method not found) or arguments
        the guard rejects (invalid params); neither reaches the handler.
        """
        spec = self._tools.get(name)
        if spec is None:
            raise ProtocolError(METHOD_NOT_FOUND, f"Unknown tool: {name}")

        try:
            parsed = spec.guard(arguments)
        except GuardError as exc:
            logger.info("invalid_params tool=%s reason=%s", name, exc)
            raise ProtocolError(INVALID_PARAMS, f"Invalid {name} arguments: {exc}") from exc

        return spec.handler(config, launcher, parsed)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)


def create_default_registry() -> ToolRegistry:
    """Create registry with the four scanner tools."""
    from .handlers import ALL_HANDLERS

    registry = ToolRegistry()
    registry.register_many(ALL_HANDLERS)
    return registry


__all__ = ["GuardFunc", "HandlerFunc", "ToolRegistry", "ToolSpec", "create_default_registry"]
