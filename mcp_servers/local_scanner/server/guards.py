"""Argument guards.

Each guard takes the raw `arguments` value of a tool call and either returns a
typed, immutable record or raises GuardError naming the first problem found.
Unknown extra keys are ignored. An optional key that is present must carry a
value of its type; JSON null is not the same as leaving the key out.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..tools.base import LOCALHOST_PREFIXES, is_localhost_url

ACTION_TYPES = ("click", "type", "wait")
LANGUAGES = ("javascript", "typescript", "css")


class GuardError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class ScanAction:
    type: str
    selector: str | None = None
    text: str | None = None
    time: float | None = None


@dataclass(frozen=True, slots=True)
class ScanArgs:
    url: str
    wait_time: float | None = None
    actions: tuple[ScanAction, ...] = ()


@dataclass(frozen=True, slots=True)
class ScreenshotArgs:
    url: str
    full_page: bool = False
    wait_time: float | None = None


@dataclass(frozen=True, slots=True)
class LintArgs:
    file_path: str
    language: str | None = None


@dataclass(frozen=True, slots=True)
class ValidateHtmlArgs:
    source: str
    is_url: bool = False


def _is_number(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is never a number here.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_object(args: Any) -> dict[str, Any]:
    if not isinstance(args, dict):
        raise GuardError("arguments must be an object")
    return args


def _required_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str):
        raise GuardError(f"'{key}' must be a string")
    return value


def _optional(args: dict[str, Any], key: str, check: Callable[[Any], bool], expected: str) -> Any:
    # An absent key means "use the default"; an explicit null is a type error.
    if key not in args:
        return None
    value = args[key]
    if not check(value):
        raise GuardError(f"'{key}' must be {expected}")
    return value


def _optional_str(args: dict[str, Any], key: str) -> str | None:
    return _optional(args, key, lambda v: isinstance(v, str), "a string")


def _optional_number(args: dict[str, Any], key: str) -> float | None:
    return _optional(args, key, _is_number, "a number")


def _optional_bool(args: dict[str, Any], key: str) -> bool | None:
    return _optional(args, key, lambda v: isinstance(v, bool), "a boolean")


def _localhost_url(args: dict[str, Any]) -> str:
    url = _required_str(args, "url")
    if not is_localhost_url(url):
        raise GuardError(f"'url' must start with {' or '.join(LOCALHOST_PREFIXES)}")
    return url


def _parse_action(raw: Any, index: int) -> ScanAction:
    if not isinstance(raw, dict):
        raise GuardError(f"actions[{index}] must be an object")
    kind = raw.get("type")
    if kind not in ACTION_TYPES:
        raise GuardError(f"actions[{index}].type must be one of {', '.join(ACTION_TYPES)}")
    try:
        return ScanAction(
            type=kind,
            selector=_optional_str(raw, "selector"),
            text=_optional_str(raw, "text"),
            time=_optional_number(raw, "time"),
        )
    except GuardError as exc:
        raise GuardError(f"actions[{index}]: {exc}") from exc


def parse_scan_args(args: Any) -> ScanArgs:
    args = _require_object(args)
    url = _localhost_url(args)
    wait_time = _optional_number(args, "waitTime")
    raw_actions = args.get("actions", [])
    if not isinstance(raw_actions, list):
        raise GuardError("'actions' must be an array")
    actions = tuple(_parse_action(raw, i) for i, raw in enumerate(raw_actions))
    return ScanArgs(url=url, wait_time=wait_time, actions=actions)


def parse_screenshot_args(args: Any) -> ScreenshotArgs:
    args = _require_object(args)
    url = _localhost_url(args)
    full_page = _optional_bool(args, "fullPage")
    wait_time = _optional_number(args, "waitTime")
    return ScreenshotArgs(url=url, full_page=bool(full_page), wait_time=wait_time)


def parse_lint_args(args: Any) -> LintArgs:
    args = _require_object(args)
    file_path = _required_str(args, "filePath")
    language = args.get("language")
    if "language" in args and language not in LANGUAGES:
        raise GuardError(f"'language' must be one of {', '.join(LANGUAGES)}")
    return LintArgs(file_path=file_path, language=language)


def parse_validate_html_args(args: Any) -> ValidateHtmlArgs:
    args = _require_object(args)
    source = _required_str(args, "source")
    is_url = _optional_bool(args, "isUrl")
    return ValidateHtmlArgs(source=source, is_url=bool(is_url))


__all__ = [
    "ACTION_TYPES",
    "GuardError",
    "LANGUAGES",
    "LintArgs",
    "ScanAction",
    "ScanArgs",
    "ScreenshotArgs",
    "ValidateHtmlArgs",
    "parse_lint_args",
    "parse_scan_args",
    "parse_screenshot_args",
    "parse_validate_html_args",
]
