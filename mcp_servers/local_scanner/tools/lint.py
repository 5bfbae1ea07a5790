"""
Lint tools: ESLint for JavaScript/TypeScript, stylelint for CSS.

Both linters are Node.js CLIs and run as subprocesses fed the file content on
stdin; their JSON reports are returned unchanged.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from typing import TYPE_CHECKING, Any

from .base import SmartToolError

if TYPE_CHECKING:
    from ..config import ScannerConfig

logger = logging.getLogger("mcp.local_scanner.lint")

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".js": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".css": "css",
}

TYPESCRIPT_OVERRIDE_CONFIG = ".eslintrc-typescript.json"

STYLELINT_RULES: dict[str, bool] = {
    "color-no-invalid-hex": True,
    "font-family-no-duplicate-names": True,
    "function-calc-no-unspaced-operator": True,
    "unit-no-unknown": True,
    "block-no-empty": True,
    "selector-pseudo-class-no-unknown": True,
    "selector-pseudo-element-no-unknown": True,
    "selector-type-no-unknown": True,
    "media-feature-name-no-unknown": True,
    "at-rule-no-unknown": True,
    "comment-no-empty": True,
    "no-duplicate-selectors": True,
    "no-empty-source": True,
    "no-extra-semicolons": True,
    "no-invalid-double-slash-comments": True,
    "declaration-block-no-duplicate-properties": True,
}

# ESLint: 0 = clean, 1 = lint errors, 2 = crash/config problem.
_ESLINT_OK_CODES = {0, 1}
# stylelint: 0 = clean, 2 = lint problems; 1 and 78 are crashes/config problems.
_STYLELINT_OK_CODES = {0, 2}


def resolve_language(file_path: str, language: str | None = None) -> str:
    """Explicit language wins; otherwise sniff the file extension."""
    if language:
        return language
    ext = os.path.splitext(file_path)[1].lower()
    detected = LANGUAGE_BY_EXTENSION.get(ext)
    if detected is None:
        raise SmartToolError(
            tool="lint_code",
            action="detect_language",
            reason=f"Cannot determine language for file extension: {ext or '(none)'}",
            suggestion="Pass language explicitly (javascript, typescript or css)",
        )
    return detected


def _read_source(file_path: str) -> str:
    if not os.path.exists(file_path):
        raise SmartToolError(
            tool="lint_code",
            action="read",
            reason=f"File not found: {file_path}",
            suggestion="Check the path (relative paths resolve against the server's working directory)",
        )
    with open(file_path, encoding="utf-8") as fp:
        return fp.read()


def _run_linter(
    name: str,
    command: list[str],
    source: str,
    *,
    timeout: float,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
    env_var: str,
) -> subprocess.CompletedProcess:
    logger.info("lint_run tool=%s cmd=%s", name, command[0])
    try:
        return subprocess.run(
            command,
            input=source,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=timeout,
            cwd=cwd,
            env=env,
        )
    except FileNotFoundError as exc:
        raise SmartToolError(
            tool="lint_code",
            action=name,
            reason=f"{name} executable not found ({command[0]})",
            suggestion=f"Install {name} or point {env_var} at it (e.g. '{env_var}=npx {name}')",
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise SmartToolError(
            tool="lint_code",
            action=name,
            reason=f"{name} timed out after {timeout:g}s",
            suggestion="Raise MCP_LINT_TIMEOUT or lint a smaller file",
        ) from exc


def _parse_report(name: str, proc: subprocess.CompletedProcess, ok_codes: set[int], streams: tuple[str, ...]) -> list:
    if proc.returncode not in ok_codes:
        detail = (proc.stderr or proc.stdout or "").strip()
        raise SmartToolError(
            tool="lint_code",
            action=name,
            reason=f"{name} exited with code {proc.returncode}: {detail[:2000]}",
            suggestion=f"Check the {name} installation and project configuration",
        )
    for stream in streams:
        raw = (getattr(proc, stream) or "").strip()
        if not raw:
            continue
        try:
            report = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if isinstance(report, list):
            return report
    raise SmartToolError(
        tool="lint_code",
        action=name,
        reason=f"{name} produced no JSON report",
        suggestion="Make sure the configured command supports the JSON formatter",
        details={"stderr": (proc.stderr or "")[:2000]},
    )


def lint_css(config: ScannerConfig, file_path: str, source: str) -> dict[str, Any]:
    """Lint CSS with the fixed stylelint rule set."""
    fd, config_path = tempfile.mkstemp(prefix="stylelint-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            json.dump({"rules": STYLELINT_RULES}, fp)
        command = [
            *config.stylelint_command,
            "--stdin",
            "--stdin-filename",
            file_path,
            "--formatter",
            "json",
            "--config",
            config_path,
        ]
        proc = _run_linter(
            "stylelint", command, source, timeout=config.lint_timeout, env_var="MCP_STYLELINT_CMD"
        )
    finally:
        os.unlink(config_path)

    # stylelint >= 16 prints the report on stderr.
    results = _parse_report("stylelint", proc, _STYLELINT_OK_CODES, ("stdout", "stderr"))
    first = results[0] if results and isinstance(results[0], dict) else {}
    return {
        "warnings": first.get("warnings") or [],
        "errored": any(bool(r.get("errored")) for r in results if isinstance(r, dict)),
    }


def lint_script(config: ScannerConfig, file_path: str, source: str, language: str) -> dict[str, Any]:
    """Lint JavaScript/TypeScript with ESLint."""
    file_dir = os.path.dirname(os.path.abspath(file_path))
    command = [
        *config.eslint_command,
        "--stdin",
        "--stdin-filename",
        os.path.abspath(file_path),
        "--format",
        "json",
    ]
    env: dict[str, str] | None = None

    if language == "typescript":
        override = os.path.join(file_dir, TYPESCRIPT_OVERRIDE_CONFIG)
        if os.path.isfile(override):
            command += ["--config", override]
            # The override is an eslintrc-style file, not a flat config.
            env = {**os.environ, "ESLINT_USE_FLAT_CONFIG": "false"}
            logger.info("lint_override config=%s", override)

    proc = _run_linter(
        "eslint", command, source, timeout=config.lint_timeout, cwd=file_dir, env=env, env_var="MCP_ESLINT_CMD"
    )
    results = _parse_report("eslint", proc, _ESLINT_OK_CODES, ("stdout",))
    first = results[0] if results and isinstance(results[0], dict) else {}
    return {
        "results": first.get("messages") or [],
        "errorCount": int(first.get("errorCount") or 0),
        "warningCount": int(first.get("warningCount") or 0),
    }


def lint_file(config: ScannerConfig, file_path: str, language: str | None = None) -> dict[str, Any]:
    """Lint one file, choosing the engine from the (resolved) language."""
    resolved = resolve_language(file_path, language)
    source = _read_source(file_path)
    if resolved == "css":
        return {"filePath": file_path, "language": resolved, **lint_css(config, file_path, source)}
    return {"filePath": file_path, "language": resolved, **lint_script(config, file_path, source, resolved)}
